"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from docbase_tasks.tasks.api import StartJobParams
from docbase_tasks.tasks.docbase import DocumentBase
from docbase_tasks.tasks.models import AudioCue, JobKind
from docbase_tasks.tasks.orchestrator import DocbaseTaskOrchestrator
from docbase_tasks.tasks.poller import JobSinks
from docbase_tasks.tasks.scratch import InMemoryScratchStorage


class ManualTimer:
    """Timer fake whose ticks are fired explicitly by the test."""

    def __init__(self) -> None:
        self._callback: Callable[[], None] | None = None
        self.started = 0
        self.stopped = 0
        self.fired_after_stop = 0

    @property
    def running(self) -> bool:
        return self._callback is not None

    def start(self, callback: Callable[[], None]) -> None:
        self.started += 1
        self._callback = callback

    def stop(self) -> None:
        self.stopped += 1
        self._callback = None

    def fire(self) -> bool:
        """Fire one tick; ``False`` when the timer was already stopped."""

        if self._callback is None:
            self.fired_after_stop += 1
            return False
        self._callback()
        return True


class RecordingSinks:
    """Collects every call made to the progress/notify/audio/display sinks."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []
        self.progress: list[tuple[bool, str, str, str | None, bool]] = []
        self.notifications: list[tuple[str, str]] = []
        self.cues: list[AudioCue] = []
        self.displayed: list[DocumentBase] = []

    def show(
        self,
        active: bool,
        title: str = "",
        detail: str = "",
        job_id: str | None = None,
        locked: bool = False,
    ) -> None:
        entry = (active, title, detail, job_id, locked)
        self.progress.append(entry)
        self.events.append(("progress", entry))

    def notify(self, title: str, message: str) -> None:
        self.notifications.append((title, message))
        self.events.append(("notify", (title, message)))

    def play(self, cue: AudioCue) -> None:
        self.cues.append(cue)
        self.events.append(("audio", cue))

    def display(self, document_base: DocumentBase) -> None:
        self.displayed.append(document_base)
        self.events.append(("display", document_base.name))

    def as_job_sinks(self) -> JobSinks:
        return JobSinks(progress=self, notifier=self, audio=self, display=self)


class FakeDocbaseApi:
    """Scripted remote service: queued task ids and status documents.

    ``start_error`` is raised from every start call; ``on_status`` replaces
    the scripted status lookup.
    """

    def __init__(
        self,
        *,
        task_ids: list[str | None] | None = None,
        statuses: list[Any] | None = None,
        start_error: Exception | None = None,
        on_status: Callable[[str], Any] | None = None,
    ) -> None:
        self.task_ids = list(task_ids or [])
        self.statuses = list(statuses or [])
        self.start_error = start_error
        self.on_status = on_status
        self.start_calls: list[tuple[JobKind, StartJobParams]] = []
        self.status_calls: list[str] = []

    def start_job(self, kind: JobKind, params: StartJobParams) -> str | None:
        self.start_calls.append((kind, params))
        if self.start_error is not None:
            raise self.start_error
        return self.task_ids.pop(0) if self.task_ids else None

    def get_job_status(self, task_id: str) -> Any | None:
        self.status_calls.append(task_id)
        if self.on_status is not None:
            return self.on_status(task_id)
        if not self.statuses:
            return {"state": "PENDING", "meta": {}}
        return self.statuses.pop(0)


class StatusPayloads:
    """Builders for raw status documents as the remote service sends them."""

    @staticmethod
    def running(status: str | None = None, state: str = "RUNNING") -> dict[str, Any]:
        meta: dict[str, Any] = {}
        if status is not None:
            meta["status"] = status
        return {"state": state, "meta": meta}

    @staticmethod
    def success(
        nuggets: list[dict[str, Any]],
        attributes: list[str] | None = None,
    ) -> dict[str, Any]:
        msg: dict[str, Any] = {"nuggets": nuggets}
        if attributes is not None:
            msg["attributes"] = attributes
        return {"state": "SUCCESS", "meta": {"document_base_to_ui": {"msg": msg}}}

    @staticmethod
    def nugget(name: str, text: Any, start: Any, end: Any) -> dict[str, Any]:
        return {"document": {"name": name, "text": text}, "start_char": start, "end_char": end}


@pytest.fixture()
def payloads() -> type[StatusPayloads]:
    return StatusPayloads


@pytest.fixture()
def make_api() -> type[FakeDocbaseApi]:
    return FakeDocbaseApi


@pytest.fixture()
def sinks() -> RecordingSinks:
    return RecordingSinks()


@pytest.fixture()
def manual_timer() -> ManualTimer:
    return ManualTimer()


@pytest.fixture()
def timers() -> list[ManualTimer]:
    return []


@pytest.fixture()
def scratch() -> InMemoryScratchStorage:
    return InMemoryScratchStorage()


@pytest.fixture()
def make_orchestrator(sinks, timers, scratch):
    """Build an orchestrator over a fake API; each session gets a fresh ManualTimer."""

    def _make(api: FakeDocbaseApi, *, scratch_storage=None) -> DocbaseTaskOrchestrator:
        def _timer_factory() -> ManualTimer:
            timer = ManualTimer()
            timers.append(timer)
            return timer

        return DocbaseTaskOrchestrator(
            api=api,
            sinks=sinks.as_job_sinks(),
            scratch=scratch_storage if scratch_storage is not None else scratch,
            timer_factory=_timer_factory,
        )

    return _make
