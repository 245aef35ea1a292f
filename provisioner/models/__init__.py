"""
Data models for the workstation provisioner.
"""

from .catalog import CatalogItem, Category, ItemKind
from .installation import (
    InstallJob,
    InstallMode,
    InstallOutcome,
    InvalidTransitionError,
    JobState,
    ProbeResult,
    RunStatistics,
)

__all__ = [
    "CatalogItem",
    "Category",
    "ItemKind",
    "InstallJob",
    "InstallMode",
    "InstallOutcome",
    "InvalidTransitionError",
    "JobState",
    "ProbeResult",
    "RunStatistics"
]
