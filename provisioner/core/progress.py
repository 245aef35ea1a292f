"""
Progress events emitted by the orchestrator and the listeners that render them.
"""

import logging
from typing import Callable, List, Optional, Tuple
from pydantic import BaseModel, Field

from ..models.installation import JobState

ProgressListener = Callable[["ProgressEvent"], None]


class ProgressEvent(BaseModel):
    """A single job state transition."""
    item_id: str
    display_name: str
    state: JobState
    completed: int = Field(..., ge=0, description="Jobs in a terminal state")
    total: int = Field(..., ge=0, description="Jobs in this run")
    running: Tuple[str, ...] = Field(default=(), description="Items currently installing")
    message: Optional[str] = None

    @property
    def ratio(self) -> float:
        if not self.total:
            return 1.0
        return self.completed / self.total


class ProgressReporter:
    """Fans progress events out to listeners.

    Listener failures are logged and dropped; reporting never changes the
    outcome of a run.
    """

    def __init__(self, listeners: Optional[List[ProgressListener]] = None):
        self.logger = logging.getLogger(__name__)
        self._listeners: List[ProgressListener] = list(listeners or [])

    def subscribe(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    def emit(self, event: ProgressEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                self.logger.warning(f"Progress listener {listener!r} failed: {e}")


class LogProgressRenderer:
    """Renders progress events as log lines."""

    _LEVELS = {
        JobState.FAILED: logging.ERROR,
        JobState.CANCELLED: logging.WARNING,
    }

    def __init__(self, logger: Optional[logging.Logger] = None, show_running: bool = False):
        self.logger = logger or logging.getLogger("provisioner.progress")
        self.show_running = show_running

    def format(self, event: ProgressEvent) -> str:
        line = f"[{event.completed}/{event.total}] {event.display_name}: {event.state.value}"
        if event.message:
            line += f" ({event.message})"
        if self.show_running and event.running:
            line += f" | running: {', '.join(event.running)}"
        return line

    def __call__(self, event: ProgressEvent) -> None:
        level = self._LEVELS.get(event.state, logging.INFO)
        self.logger.log(level, self.format(event))
