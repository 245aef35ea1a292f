from __future__ import annotations

import logging

from provisioner.core.progress import LogProgressRenderer, ProgressEvent, ProgressReporter
from provisioner.models.installation import JobState


def make_event(**overrides) -> ProgressEvent:
    data = dict(
        item_id="Git.Git",
        display_name="Git",
        state=JobState.SUCCEEDED,
        completed=2,
        total=4,
    )
    data.update(overrides)
    return ProgressEvent(**data)


def test_ratio():
    assert make_event().ratio == 0.5
    assert make_event(completed=0, total=0).ratio == 1.0


def test_reporter_keeps_delivering_after_listener_failure():
    received = []

    def broken(event):
        raise RuntimeError("nope")

    reporter = ProgressReporter([broken])
    reporter.subscribe(received.append)

    reporter.emit(make_event())

    assert len(received) == 1


def test_renderer_format():
    renderer = LogProgressRenderer()

    assert renderer.format(make_event()) == "[2/4] Git: succeeded"
    assert renderer.format(make_event(state=JobState.FAILED, message="exit code 1")) == (
        "[2/4] Git: failed (exit code 1)"
    )


def test_renderer_shows_running_set_when_enabled():
    event = make_event(state=JobState.RUNNING, running=("Git", "jq"))

    assert "running: Git, jq" in LogProgressRenderer(show_running=True).format(event)
    assert LogProgressRenderer().format(event) == "[2/4] Git: running"


def test_renderer_logs_failures_as_errors(caplog):
    renderer = LogProgressRenderer(logger=logging.getLogger("test.progress"))

    with caplog.at_level(logging.INFO, logger="test.progress"):
        renderer(make_event(state=JobState.FAILED))
        renderer(make_event(state=JobState.SKIPPED))

    assert [r.levelno for r in caplog.records] == [logging.ERROR, logging.INFO]
