"""
Installation job and run statistics models.
"""

from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from .catalog import CatalogItem


class InstallMode(str, Enum):
    """How the orchestrator dispatches installs."""
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class JobState(str, Enum):
    """State of an installation job."""
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({
    JobState.SUCCEEDED,
    JobState.FAILED,
    JobState.SKIPPED,
    JobState.CANCELLED,
})

_ALLOWED_TRANSITIONS = {
    JobState.PENDING: {JobState.RUNNING, JobState.SKIPPED, JobState.CANCELLED},
    JobState.RUNNING: {JobState.SUCCEEDED, JobState.FAILED},
}


class InvalidTransitionError(ValueError):
    """Raised when a job is moved to a state its lifecycle does not allow."""


class ProbeResult(str, Enum):
    """Result of an existence probe."""
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"


class InstallOutcome(BaseModel):
    """Raw result of one installer call."""
    exit_code: int = Field(..., description="Process exit code")
    output: str = Field(default="", description="Combined stdout/stderr text")


class InstallJob(BaseModel):
    """One installation attempt for a catalog item."""
    item: CatalogItem
    state: JobState = Field(default=JobState.PENDING)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    error: Optional[str] = Field(None, description="Failure reason if failed")
    output: Optional[str] = Field(None, description="Installer output")

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def transition(self, state: JobState, error: Optional[str] = None) -> None:
        """Move the job to a new state, enforcing the job lifecycle."""
        if state not in _ALLOWED_TRANSITIONS.get(self.state, set()):
            raise InvalidTransitionError(
                f"{self.item.id}: cannot move from {self.state.value} to {state.value}"
            )
        now = datetime.utcnow()
        if state == JobState.RUNNING:
            self.started_at = now
        else:
            self.finished_at = now
        self.state = state
        if error:
            self.error = error

    def start(self) -> None:
        self.transition(JobState.RUNNING)

    def succeed(self, output: Optional[str] = None) -> None:
        self.output = output
        self.transition(JobState.SUCCEEDED)

    def fail(self, error: str, output: Optional[str] = None) -> None:
        self.output = output
        self.transition(JobState.FAILED, error)

    def skip(self) -> None:
        self.transition(JobState.SKIPPED)

    def cancel(self) -> None:
        self.transition(JobState.CANCELLED)


class RunStatistics(BaseModel):
    """Aggregate counters for one orchestrator run."""
    installed: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    cancelled: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.installed + self.skipped + self.failed + self.cancelled

    def record(self, state: JobState) -> None:
        """Count one job that reached a terminal state."""
        if state == JobState.SUCCEEDED:
            self.installed += 1
        elif state == JobState.SKIPPED:
            self.skipped += 1
        elif state == JobState.FAILED:
            self.failed += 1
        elif state == JobState.CANCELLED:
            self.cancelled += 1
        else:
            raise ValueError(f"Cannot record non-terminal state: {state.value}")
