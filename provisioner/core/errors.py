"""
Exception types raised by the provisioner.
"""

from typing import Optional

from ..models.catalog import CatalogItem


class ProvisioningError(Exception):
    """Base class for provisioner errors."""


class InstallerUnavailableError(ProvisioningError):
    """The installer itself (package manager, shell) is missing.

    This is the only error that escapes an orchestrator run. It is raised
    before any item is probed or dispatched.
    """

    def __init__(self, installer: str, detail: Optional[str] = None):
        self.installer = installer
        self.detail = detail
        message = f"Installer '{installer}' is not available"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ItemInstallFailure(ProvisioningError):
    """One item's install did not succeed. Recorded, never fatal."""

    def __init__(self, item: CatalogItem, reason: str, output: Optional[str] = None):
        self.item = item
        self.reason = reason
        self.output = output
        super().__init__(f"{item.display_name} ({item.id}): {reason}")


class ExistenceCheckError(ProvisioningError):
    """An existence probe could not determine whether an item is installed."""

    def __init__(self, item_id: str, reason: str):
        self.item_id = item_id
        self.reason = reason
        super().__init__(f"Existence check failed for {item_id}: {reason}")


class UnknownCategoryError(ProvisioningError, KeyError):
    """Requested catalog category does not exist."""

    def __init__(self, name: str, available: tuple):
        self.name = name
        self.available = available
        super().__init__(f"Unknown category '{name}' (available: {', '.join(available)})")

    def __str__(self) -> str:
        return self.args[0]
