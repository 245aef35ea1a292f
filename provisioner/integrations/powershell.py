"""
PowerShell module installer (PowerShellGet via pwsh).
"""

from typing import List

from ..core.errors import ExistenceCheckError
from ..models.installation import InstallOutcome, ProbeResult
from .installer import CommandInstaller

# pwsh exit code for "module not found" in the probe script
_ABSENT_EXIT_CODE = 3


def quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal."""
    return "'" + value.replace("'", "''") + "'"


class PowerShellModuleInstaller(CommandInstaller):
    """Installs PowerShell modules from a PowerShellGet repository."""

    name = "powershell"

    def __init__(self,
                 executable: str = "pwsh",
                 scope: str = "CurrentUser",
                 repository: str = "PSGallery"):
        super().__init__(executable)
        self.scope = scope
        self.repository = repository

    def command_args(self, script: str) -> List[str]:
        return ["-NoLogo", "-NoProfile", "-NonInteractive", "-Command", script]

    def probe_script(self, module: str) -> str:
        return (
            f"if (Get-Module -ListAvailable -Name {quote(module)}) "
            f"{{ exit 0 }} else {{ exit {_ABSENT_EXIT_CODE} }}"
        )

    def install_script(self, module: str) -> str:
        return (
            f"Install-Module -Name {quote(module)} -Scope {quote(self.scope)} "
            f"-Repository {quote(self.repository)} -Force -AllowClobber -ErrorAction Stop"
        )

    async def probe(self, item_id: str) -> ProbeResult:
        try:
            outcome = await self._run(*self.command_args(self.probe_script(item_id)))
        except OSError as e:
            raise ExistenceCheckError(item_id, str(e)) from e

        if outcome.exit_code == 0:
            return ProbeResult.PRESENT
        if outcome.exit_code == _ABSENT_EXIT_CODE:
            return ProbeResult.ABSENT
        return ProbeResult.UNKNOWN

    async def install(self, item_id: str) -> InstallOutcome:
        self.logger.info(f"Install-Module {item_id}")
        return await self._run(*self.command_args(self.install_script(item_id)))
