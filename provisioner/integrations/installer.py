"""
Base classes for installer collaborators.
"""

import abc
import asyncio
import logging
import shutil
from typing import Sequence

from ..core.errors import InstallerUnavailableError
from ..models.installation import InstallOutcome, ProbeResult


class Installer(abc.ABC):
    """Something that can check for and install catalog items."""

    name: str = "installer"
    success_markers: Sequence[str] = ()

    def ensure_available(self) -> None:
        """Raise InstallerUnavailableError if the installer cannot be used at all."""

    @abc.abstractmethod
    async def probe(self, item_id: str) -> ProbeResult:
        """Report whether an item is installed. May raise ExistenceCheckError."""

    @abc.abstractmethod
    async def install(self, item_id: str) -> InstallOutcome:
        """Install an item and return the raw outcome."""

    async def is_installed(self, item_id: str) -> bool:
        return await self.probe(item_id) == ProbeResult.PRESENT

    def is_success(self, outcome: InstallOutcome) -> bool:
        """
        Decide whether an install outcome counts as a success.

        The exit code is authoritative. Output containing one of the
        installer's success markers is accepted for installers known to
        return non-zero codes on success (e.g. "already installed").
        """
        if outcome.exit_code == 0:
            return True
        output = outcome.output.lower()
        return any(marker.lower() in output for marker in self.success_markers)


class CommandInstaller(Installer):
    """Installer backed by an external command line tool."""

    def __init__(self, executable: str):
        self.logger = logging.getLogger(__name__)
        self.executable = executable

    def ensure_available(self) -> None:
        if not shutil.which(self.executable):
            raise InstallerUnavailableError(
                self.name, f"'{self.executable}' not found on PATH"
            )

    async def _run(self, *args: str) -> InstallOutcome:
        """Run the executable with arguments, capturing combined output."""
        self.logger.debug(f"Running: {self.executable} {' '.join(args)}")
        process = await asyncio.create_subprocess_exec(
            self.executable, *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT
        )
        try:
            stdout, _ = await process.communicate()
        except asyncio.CancelledError:
            # Timed out or cancelled: do not leave the child running
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        output = stdout.decode(errors="replace") if stdout else ""
        return InstallOutcome(exit_code=process.returncode, output=output)
