"""
Installation orchestrator: existence checks, sequential or parallel dispatch,
progress reporting and run statistics.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from ..models.catalog import CatalogItem
from ..models.installation import (
    InstallJob,
    InstallMode,
    JobState,
    ProbeResult,
    RunStatistics,
)
from .errors import ExistenceCheckError, ItemInstallFailure
from .progress import ProgressEvent, ProgressReporter

if TYPE_CHECKING:
    from ..integrations.installer import Installer


class InstallationOrchestrator:
    """Installs catalog items through an installer and tracks each outcome."""

    def __init__(self,
                 installer: "Installer",
                 max_concurrent_jobs: int = 4,
                 item_timeout: Optional[float] = None,
                 reporter: Optional[ProgressReporter] = None):
        """
        Initialize the orchestrator.

        Args:
            installer: Installer used for probing and installing items
            max_concurrent_jobs: Maximum concurrent installs in parallel mode
            item_timeout: Seconds before a single install is marked failed
            reporter: Progress reporter receiving one event per state transition
        """
        if max_concurrent_jobs < 1:
            raise ValueError("max_concurrent_jobs must be at least 1")
        if item_timeout is not None and item_timeout <= 0:
            raise ValueError("item_timeout must be positive")
        self.logger = logging.getLogger(__name__)
        self.installer = installer
        self.max_concurrent_jobs = max_concurrent_jobs
        self.item_timeout = item_timeout
        self.reporter = reporter or ProgressReporter()

        self._jobs: List[InstallJob] = []
        self._running: List[str] = []
        self._completed = 0

    @property
    def jobs(self) -> List[InstallJob]:
        """Jobs of the most recent run, in catalog order."""
        return list(self._jobs)

    @property
    def running(self) -> Tuple[str, ...]:
        """Display names of items currently installing."""
        return tuple(self._running)

    async def run(self,
                  items: Sequence[CatalogItem],
                  mode: InstallMode = InstallMode.SEQUENTIAL,
                  force_reinstall: bool = False,
                  cancel_event: Optional[asyncio.Event] = None) -> RunStatistics:
        """
        Install items and return aggregate statistics.

        Only InstallerUnavailableError escapes; every per-item problem is
        recorded in the returned statistics.

        Args:
            items: Catalog items in catalog order
            mode: Sequential or parallel dispatch
            force_reinstall: Install even if the item is reported present
            cancel_event: When set, no further items are dispatched

        Returns:
            Run statistics
        """
        self._jobs = [InstallJob(item=item) for item in items]
        self._running = []
        self._completed = 0
        stats = RunStatistics()

        if not self._jobs:
            return stats

        self.installer.ensure_available()
        self.logger.info(
            f"Installing {len(self._jobs)} items with {self.installer.name} "
            f"({mode.value}, force={force_reinstall})"
        )

        if mode == InstallMode.PARALLEL:
            await self._run_parallel(stats, force_reinstall, cancel_event)
        else:
            await self._run_sequential(stats, force_reinstall, cancel_event)

        self.logger.info(
            f"Run complete: installed={stats.installed} skipped={stats.skipped} "
            f"failed={stats.failed} cancelled={stats.cancelled}"
        )
        return stats

    async def plan(self,
                   items: Sequence[CatalogItem],
                   force_reinstall: bool = False) -> Tuple[List[CatalogItem], List[CatalogItem]]:
        """
        Partition items into (to_install, already_installed) without installing.
        """
        if not items:
            return [], []
        self.installer.ensure_available()

        to_install: List[CatalogItem] = []
        present: List[CatalogItem] = []
        for item in items:
            if not force_reinstall and await self._probe(item) == ProbeResult.PRESENT:
                present.append(item)
            else:
                to_install.append(item)
        return to_install, present

    async def _run_sequential(self,
                              stats: RunStatistics,
                              force_reinstall: bool,
                              cancel_event: Optional[asyncio.Event]) -> None:
        for job in self._jobs:
            if cancel_event is not None and cancel_event.is_set():
                job.cancel()
            elif await self._should_skip(job, force_reinstall):
                job.skip()
            else:
                await self._execute(job)
            self._finish(job, stats)

    async def _run_parallel(self,
                            stats: RunStatistics,
                            force_reinstall: bool,
                            cancel_event: Optional[asyncio.Event]) -> None:
        pending: List[InstallJob] = []
        for job in self._jobs:
            if cancel_event is not None and cancel_event.is_set():
                job.cancel()
                self._finish(job, stats)
            elif await self._should_skip(job, force_reinstall):
                job.skip()
                self._finish(job, stats)
            else:
                pending.append(job)

        if not pending:
            return

        semaphore = asyncio.Semaphore(self.max_concurrent_jobs)
        done: "asyncio.Queue[InstallJob]" = asyncio.Queue()

        async def worker(job: InstallJob) -> None:
            try:
                async with semaphore:
                    if cancel_event is not None and cancel_event.is_set():
                        job.cancel()
                    else:
                        await self._execute(job)
            finally:
                await done.put(job)

        self.logger.info(f"Dispatching {len(pending)} installs (max {self.max_concurrent_jobs} at once)")
        tasks = [asyncio.create_task(worker(job)) for job in pending]

        # Single consumer: statistics are only mutated here
        try:
            for _ in range(len(tasks)):
                job = await done.get()
                self._finish(job, stats)
        except asyncio.CancelledError:
            # Hard abort: stop in-flight installs instead of leaving them behind
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        await asyncio.gather(*tasks)

    async def _should_skip(self, job: InstallJob, force_reinstall: bool) -> bool:
        if force_reinstall:
            return False
        return await self._probe(job.item) == ProbeResult.PRESENT

    async def _probe(self, item: CatalogItem) -> ProbeResult:
        """Existence probe with fail-open semantics: unknown means absent."""
        try:
            result = await self.installer.probe(item.id)
        except ExistenceCheckError as e:
            self.logger.warning(str(e))
            result = ProbeResult.UNKNOWN
        except Exception as e:
            self.logger.warning(f"Existence check failed for {item.id}: {e}")
            result = ProbeResult.UNKNOWN

        if result == ProbeResult.UNKNOWN:
            self.logger.debug(f"Presence of {item.id} unknown, treating as absent")
            return ProbeResult.ABSENT
        return result

    async def _execute(self, job: InstallJob) -> None:
        """Run one install. Always leaves the job succeeded or failed."""
        job.start()
        self._running.append(job.item.display_name)
        self._emit(job)
        try:
            output = await self._attempt(job.item)
            job.succeed(output)
        except ItemInstallFailure as e:
            self.logger.error(f"Install failed: {e}")
            job.fail(e.reason, e.output)
        except Exception as e:
            self.logger.error(f"Install error for {job.item.id}: {e}", exc_info=True)
            job.fail(str(e) or type(e).__name__)
        finally:
            self._running.remove(job.item.display_name)

    async def _attempt(self, item: CatalogItem) -> str:
        try:
            if self.item_timeout is not None:
                outcome = await asyncio.wait_for(
                    self.installer.install(item.id), timeout=self.item_timeout
                )
            else:
                outcome = await self.installer.install(item.id)
        except asyncio.TimeoutError:
            raise ItemInstallFailure(item, f"timed out after {self.item_timeout} seconds")

        if not self.installer.is_success(outcome):
            raise ItemInstallFailure(
                item, f"installer exited with code {outcome.exit_code}", outcome.output
            )
        return outcome.output

    def _finish(self, job: InstallJob, stats: RunStatistics) -> None:
        stats.record(job.state)
        self._completed += 1
        self._emit(job)

    def _emit(self, job: InstallJob) -> None:
        self.reporter.emit(ProgressEvent(
            item_id=job.item.id,
            display_name=job.item.display_name,
            state=job.state,
            completed=self._completed,
            total=len(self._jobs),
            running=tuple(self._running),
            message=job.error
        ))
