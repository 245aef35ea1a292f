"""
Core modules for the workstation provisioner.
"""

from .errors import (
    ExistenceCheckError,
    InstallerUnavailableError,
    ItemInstallFailure,
    ProvisioningError,
    UnknownCategoryError,
)
from .orchestrator import InstallationOrchestrator
from .progress import LogProgressRenderer, ProgressEvent, ProgressReporter
from . import catalog

__all__ = [
    "InstallationOrchestrator",
    "ProgressEvent",
    "ProgressReporter",
    "LogProgressRenderer",
    "ProvisioningError",
    "InstallerUnavailableError",
    "ItemInstallFailure",
    "ExistenceCheckError",
    "UnknownCategoryError",
    "catalog"
]
