"""
Installer integrations for external package managers.
"""

from .installer import Installer, CommandInstaller
from .winget import WingetInstaller
from .powershell import PowerShellModuleInstaller
from ..models.catalog import ItemKind


def build_installer(kind: ItemKind, settings) -> Installer:
    """Create the installer for an item kind from application settings."""
    if kind == ItemKind.MODULE:
        return PowerShellModuleInstaller(
            executable=settings.powershell.executable,
            scope=settings.powershell.scope,
            repository=settings.powershell.repository
        )
    return WingetInstaller(
        executable=settings.winget.executable,
        source=settings.winget.source,
        extra_args=settings.winget.extra_args,
        success_markers=settings.winget.success_markers
    )


__all__ = [
    "Installer",
    "CommandInstaller",
    "WingetInstaller",
    "PowerShellModuleInstaller",
    "build_installer"
]
