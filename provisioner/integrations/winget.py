"""
winget package manager client.
"""

from typing import List, Optional, Sequence

from ..core.errors import ExistenceCheckError
from ..models.installation import InstallOutcome, ProbeResult
from .installer import CommandInstaller

DEFAULT_SUCCESS_MARKERS = (
    "Successfully installed",
    "Found an existing package already installed",
)

NOT_INSTALLED_MARKER = "No installed package found"


class WingetInstaller(CommandInstaller):
    """Installs applications by winget package id."""

    name = "winget"

    def __init__(self,
                 executable: str = "winget",
                 source: Optional[str] = "winget",
                 extra_args: Sequence[str] = (),
                 success_markers: Sequence[str] = DEFAULT_SUCCESS_MARKERS):
        """
        Initialize the winget client.

        Args:
            executable: winget binary name or path
            source: winget source to install from (None for all sources)
            extra_args: Additional arguments appended to install commands
            success_markers: Output fragments that mark an install as successful
        """
        super().__init__(executable)
        self.source = source
        self.extra_args = list(extra_args)
        self.success_markers = tuple(success_markers)

    def list_args(self, item_id: str) -> List[str]:
        return [
            "list", "--id", item_id, "--exact",
            "--accept-source-agreements",
            "--disable-interactivity",
        ]

    def install_args(self, item_id: str) -> List[str]:
        args = [
            "install", "--id", item_id, "--exact", "--silent",
            "--accept-package-agreements",
            "--accept-source-agreements",
            "--disable-interactivity",
        ]
        if self.source:
            args += ["--source", self.source]
        return args + self.extra_args

    async def probe(self, item_id: str) -> ProbeResult:
        try:
            outcome = await self._run(*self.list_args(item_id))
        except OSError as e:
            raise ExistenceCheckError(item_id, str(e)) from e

        if outcome.exit_code == 0 and item_id.lower() in outcome.output.lower():
            return ProbeResult.PRESENT
        if NOT_INSTALLED_MARKER.lower() in outcome.output.lower():
            return ProbeResult.ABSENT

        self.logger.debug(
            f"Unrecognised winget list output for {item_id} (exit {outcome.exit_code})"
        )
        return ProbeResult.UNKNOWN

    async def install(self, item_id: str) -> InstallOutcome:
        self.logger.info(f"winget install {item_id}")
        return await self._run(*self.install_args(item_id))
