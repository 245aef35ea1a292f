from __future__ import annotations

import asyncio
import time
from typing import Dict, Iterable, List

import pytest

from provisioner.core.errors import ExistenceCheckError, InstallerUnavailableError
from provisioner.integrations.installer import Installer
from provisioner.models.catalog import CatalogItem
from provisioner.models.installation import InstallOutcome, ProbeResult


class StubInstaller(Installer):
    """In-memory installer with scripted per-item behaviour."""

    name = "stub"

    def __init__(
        self,
        present: Iterable[str] = (),
        failing: Iterable[str] = (),
        raising: Iterable[str] = (),
        probe_errors: Iterable[str] = (),
        check_crashes: Iterable[str] = (),
        delays: Dict[str, float] | None = None,
        available: bool = True,
    ):
        self.present = set(present)
        self.failing = set(failing)
        self.raising = set(raising)
        self.probe_errors = set(probe_errors)
        self.check_crashes = set(check_crashes)
        self.delays = dict(delays or {})
        self.available = available

        self.availability_checks = 0
        self.probe_calls: List[str] = []
        self.install_calls: List[str] = []
        self.dispatch_times: Dict[str, float] = {}
        self.completion_order: List[str] = []
        self.active = 0
        self.max_active = 0

    def ensure_available(self) -> None:
        self.availability_checks += 1
        if not self.available:
            raise InstallerUnavailableError(self.name, "disabled for test")

    async def probe(self, item_id: str) -> ProbeResult:
        self.probe_calls.append(item_id)
        if item_id in self.probe_errors:
            raise ExistenceCheckError(item_id, "probe exploded")
        if item_id in self.check_crashes:
            raise RuntimeError(f"lookup for {item_id} crashed")
        return ProbeResult.PRESENT if item_id in self.present else ProbeResult.ABSENT

    async def install(self, item_id: str) -> InstallOutcome:
        self.install_calls.append(item_id)
        self.dispatch_times[item_id] = time.monotonic()
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(item_id, 0))
        finally:
            self.active -= 1
        self.completion_order.append(item_id)

        if item_id in self.raising:
            raise RuntimeError(f"{item_id} blew up")
        if item_id in self.failing:
            return InstallOutcome(exit_code=1, output=f"Installer failed for {item_id}")
        return InstallOutcome(exit_code=0, output=f"Successfully installed {item_id}")


@pytest.fixture
def stub_installer():
    return StubInstaller


@pytest.fixture
def make_items():
    def _make(*ids: str) -> List[CatalogItem]:
        return [CatalogItem(id=item_id, display_name=f"{item_id} app") for item_id in ids]

    return _make
