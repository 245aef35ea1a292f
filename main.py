#!/usr/bin/env python3
"""
Main entry point for the workstation provisioner.
"""

import asyncio
import argparse
import json
import signal
import sys
import time
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from provisioner.core import catalog
from provisioner.core.errors import InstallerUnavailableError, ProvisioningError
from provisioner.core.orchestrator import InstallationOrchestrator
from provisioner.core.progress import LogProgressRenderer, ProgressReporter
from provisioner.integrations import build_installer
from provisioner.models.catalog import ItemKind
from provisioner.models.installation import InstallMode, JobState, RunStatistics
from provisioner.utils.logging import get_logger, setup_root_logger
from config.settings import Settings

logger = get_logger(__name__)

COMMAND_KINDS = {
    "packages": ItemKind.PACKAGE,
    "modules": ItemKind.MODULE,
}


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    common = argparse.ArgumentParser(add_help=False)

    common.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file (JSON format)"
    )

    common.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    install = argparse.ArgumentParser(add_help=False)

    install.add_argument(
        "-c", "--category",
        action="append",
        default=[],
        help="Catalog category to install (repeatable, default: all of this kind)"
    )

    install.add_argument(
        "--all",
        action="store_true",
        help="Install every category of this kind"
    )

    install.add_argument(
        "--parallel",
        action="store_true",
        help="Install items concurrently"
    )

    install.add_argument(
        "--max-concurrent",
        type=int,
        help="Maximum concurrent installs in parallel mode"
    )

    install.add_argument(
        "--timeout",
        type=float,
        help="Per-item install timeout in seconds"
    )

    install.add_argument(
        "--force",
        action="store_true",
        help="Reinstall items that are already installed"
    )

    install.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report what would be installed"
    )

    parser = argparse.ArgumentParser(
        description="Provision a workstation from the built-in catalog"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "list", parents=[common], help="List catalog categories and items"
    )
    subparsers.add_parser(
        "packages", parents=[common, install], help="Install applications with winget"
    )
    subparsers.add_parser(
        "modules", parents=[common, install], help="Install PowerShell modules"
    )

    return parser.parse_args(argv)


def load_config(args) -> Settings:
    """Load configuration from file, overridden by command line flags."""
    config_data = {}
    if args.config:
        if not args.config.exists():
            raise ValueError(f"Configuration file not found: {args.config}")
        with open(args.config) as f:
            config_data = json.load(f)

    orchestrator = config_data.setdefault("orchestrator", {})
    if getattr(args, "parallel", False):
        orchestrator["mode"] = InstallMode.PARALLEL.value
    if getattr(args, "max_concurrent", None) is not None:
        orchestrator["max_concurrent_jobs"] = args.max_concurrent
    if getattr(args, "timeout", None) is not None:
        orchestrator["item_timeout_seconds"] = args.timeout
    if getattr(args, "force", False):
        orchestrator["force_reinstall"] = True
    if args.log_level:
        config_data.setdefault("logging", {})["level"] = args.log_level

    return Settings(**config_data)


def print_catalog() -> None:
    """Print every category and its items."""
    for kind in ItemKind:
        for name in catalog.category_names(kind):
            category = catalog.get_category(name)
            print(f"{category.name} ({kind.value}s) - {category.description}")
            for item in category.items:
                print(f"    {item.id:<32} {item.display_name}")


def resolve_categories(args, kind: ItemKind) -> List[str]:
    """Categories requested on the command line, validated against the item kind."""
    if args.all or not args.category:
        return list(catalog.category_names(kind))

    for name in args.category:
        category = catalog.get_category(name)
        if category.kind != kind:
            command = "modules" if category.kind == ItemKind.MODULE else "packages"
            raise ValueError(
                f"Category '{name}' holds {category.kind.value}s; use the '{command}' command"
            )
    return args.category


def log_summary(stats: RunStatistics, orchestrator: InstallationOrchestrator, duration: float) -> None:
    logger.info("=" * 60)
    logger.info("SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Installed: {stats.installed}")
    logger.info(f"Skipped (already installed): {stats.skipped}")
    logger.info(f"Failed: {stats.failed}")
    if stats.cancelled:
        logger.info(f"Cancelled: {stats.cancelled}")
    logger.info(f"Duration: {duration:.2f} seconds")
    for job in orchestrator.jobs:
        if job.state == JobState.FAILED:
            logger.info(f"  FAILED {job.item.display_name} ({job.item.id}): {job.error}")
    logger.info("=" * 60)


def install_interrupt_handler(cancel_event: asyncio.Event, run_task: asyncio.Future):
    """
    Route Ctrl+C to the run.

    The first interrupt sets the cancel event so running installs can drain;
    a second one cancels the run task, which stops the running installs.
    """
    loop = asyncio.get_running_loop()
    interrupts = 0

    def handler(signum, frame):
        nonlocal interrupts
        interrupts += 1
        if interrupts == 1:
            logger.warning("Interrupted: waiting for running installs, no new installs will start "
                           "(press Ctrl+C again to stop them)")
            loop.call_soon_threadsafe(cancel_event.set)
        else:
            logger.warning("Interrupted again: stopping running installs")
            loop.call_soon_threadsafe(run_task.cancel)

    return signal.signal(signal.SIGINT, handler)


async def run_install(args, settings: Settings, kind: ItemKind) -> int:
    """Install the requested categories and return the process exit code."""
    items = catalog.select(resolve_categories(args, kind))
    options = settings.orchestrator

    reporter = ProgressReporter([
        LogProgressRenderer(show_running=options.mode == InstallMode.PARALLEL)
    ])
    orchestrator = InstallationOrchestrator(
        installer=build_installer(kind, settings),
        max_concurrent_jobs=options.max_concurrent_jobs,
        item_timeout=options.item_timeout_seconds,
        reporter=reporter
    )

    if args.dry_run:
        to_install, present = await orchestrator.plan(items, options.force_reinstall)
        for item in present:
            logger.info(f"Already installed: {item.display_name} ({item.id})")
        for item in to_install:
            logger.info(f"Would install: {item.display_name} ({item.id})")
        logger.info(f"{len(to_install)} to install, {len(present)} already installed")
        return 0

    cancel_event = asyncio.Event()
    run_task = asyncio.ensure_future(orchestrator.run(
        items,
        mode=options.mode,
        force_reinstall=options.force_reinstall,
        cancel_event=cancel_event
    ))
    previous_handler = install_interrupt_handler(cancel_event, run_task)
    start_time = time.monotonic()
    try:
        stats = await run_task
    except asyncio.CancelledError:
        if not run_task.cancelled():
            raise
        logger.error(f"Run aborted after {time.monotonic() - start_time:.2f} seconds")
        return 130
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    log_summary(stats, orchestrator, time.monotonic() - start_time)
    return 1 if stats.failed else 0


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)

    if args.command == "list":
        print_catalog()
        return 0

    # Console logging until the configured handlers are in place
    setup_root_logger(level=args.log_level or "INFO")

    try:
        settings = load_config(args)
    except (ValueError, OSError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    log_config = settings.logging
    setup_root_logger(
        log_file=log_config.file_path,
        level=log_config.level,
        format_string=log_config.format,
        max_bytes=log_config.max_file_size_mb * 1024 * 1024,
        backup_count=log_config.backup_count
    )
    logger.debug(f"Arguments: {vars(args)}")

    try:
        return await run_install(args, settings, COMMAND_KINDS[args.command])
    except InstallerUnavailableError as e:
        logger.error(f"{e}. Install it and try again.")
        return 2
    except (ProvisioningError, ValueError) as e:
        logger.error(str(e))
        return 2


def cli():
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
