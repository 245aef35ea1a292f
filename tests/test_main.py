from __future__ import annotations

import asyncio
import json
import logging
import signal

import pytest

import main as cli_main
from provisioner.core import catalog
from provisioner.models.catalog import ItemKind
from provisioner.models.installation import InstallMode


@pytest.fixture(autouse=True)
def isolated_run(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def use_installer(monkeypatch):
    def _use(installer):
        monkeypatch.setattr(cli_main, "build_installer", lambda kind, settings: installer)
        return installer

    return _use


def run_cli(*argv) -> int:
    return asyncio.run(cli_main.main(list(argv)))


def core_ids():
    return [item.id for item in catalog.get_category("core").items]


def test_list_prints_catalog(capsys):
    assert run_cli("list") == 0

    out = capsys.readouterr().out
    assert "core (packages)" in out
    assert "shell (modules)" in out
    assert "Git.Git" in out
    assert "PSReadLine" in out


def test_packages_installs_selected_category(use_installer, stub_installer):
    installer = use_installer(stub_installer())

    assert run_cli("packages", "-c", "core") == 0
    assert installer.install_calls == core_ids()


def test_defaults_to_every_category_of_the_kind(use_installer, stub_installer):
    installer = use_installer(stub_installer())

    assert run_cli("modules") == 0
    assert installer.install_calls == [item.id for item in catalog.select(["shell"])]


def test_failed_item_sets_exit_code(use_installer, stub_installer):
    use_installer(stub_installer(failing={"Git.Git"}))

    assert run_cli("packages", "-c", "core", "--parallel") == 1


def test_dry_run_installs_nothing(use_installer, stub_installer):
    installer = use_installer(stub_installer(present={"Git.Git"}))

    assert run_cli("packages", "-c", "core", "--dry-run") == 0
    assert installer.install_calls == []
    assert installer.probe_calls == core_ids()


def test_missing_installer_exits_with_error(use_installer, stub_installer):
    installer = use_installer(stub_installer(available=False))

    assert run_cli("packages", "-c", "core") == 2
    assert installer.install_calls == []


def test_category_of_wrong_kind_is_rejected(use_installer, stub_installer):
    installer = use_installer(stub_installer())

    assert run_cli("modules", "-c", "core") == 2
    assert installer.install_calls == []


def test_unknown_category_is_rejected(use_installer, stub_installer):
    use_installer(stub_installer())

    assert run_cli("packages", "-c", "fonts") == 2


def test_missing_config_file_is_rejected(tmp_path):
    assert run_cli("packages", "--config", str(tmp_path / "nope.json")) == 2


def test_flags_override_config_file(tmp_path):
    config_path = tmp_path / "provision.json"
    config_path.write_text(json.dumps({
        "orchestrator": {"max_concurrent_jobs": 6, "item_timeout_seconds": 300},
        "winget": {"source": "msstore"},
    }))

    args = cli_main.parse_arguments([
        "packages", "--config", str(config_path), "--parallel", "--timeout", "60", "--force"
    ])
    settings = cli_main.load_config(args)

    assert settings.orchestrator.mode == InstallMode.PARALLEL
    assert settings.orchestrator.max_concurrent_jobs == 6
    assert settings.orchestrator.item_timeout_seconds == 60
    assert settings.orchestrator.force_reinstall is True
    assert settings.winget.source == "msstore"


def test_resolve_categories_all_flag():
    args = cli_main.parse_arguments(["packages", "--all", "-c", "core"])

    assert cli_main.resolve_categories(args, ItemKind.PACKAGE) == list(
        catalog.category_names(ItemKind.PACKAGE)
    )


def interrupt_during_first_install(installer, times: int) -> int:
    async def _run():
        task = asyncio.ensure_future(cli_main.main(["packages", "-c", "core"]))
        while not installer.install_calls:
            await asyncio.sleep(0.01)
        handler = signal.getsignal(signal.SIGINT)
        for _ in range(times):
            handler(signal.SIGINT, None)
        return await asyncio.wait_for(task, timeout=5)

    return asyncio.run(_run())


def test_interrupt_lets_running_install_finish(use_installer, stub_installer):
    first = core_ids()[0]
    installer = use_installer(stub_installer(delays={first: 0.05}))
    original = signal.getsignal(signal.SIGINT)

    assert interrupt_during_first_install(installer, times=1) == 0
    assert installer.install_calls == [first]
    assert installer.completion_order == [first]
    assert signal.getsignal(signal.SIGINT) is original


def test_second_interrupt_stops_hung_install(use_installer, stub_installer):
    first = core_ids()[0]
    installer = use_installer(stub_installer(delays={first: 3600}))
    original = signal.getsignal(signal.SIGINT)

    assert interrupt_during_first_install(installer, times=2) == 130
    assert installer.install_calls == [first]
    assert installer.completion_order == []
    assert installer.active == 0
    assert signal.getsignal(signal.SIGINT) is original
