"""Status poller: the client-side state machine of one remote job."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from docbase_tasks.tasks.contracts import decode_document_base_payload, decode_job_status
from docbase_tasks.tasks.docbase import DocumentBase
from docbase_tasks.tasks.errors import StatusDecodeError
from docbase_tasks.tasks.gate import ConcurrencyGate
from docbase_tasks.tasks.models import AudioCue, FailureKind, Job, JobState, JobStatus
from docbase_tasks.tasks.scratch import SCRATCH_JOB_KEY, ScratchStorage
from docbase_tasks.tasks.sinks import AudioSink, DisplaySink, NotificationSink, ProgressSink
from docbase_tasks.tasks.timer import IntervalTimer
from docbase_tasks.tasks.translator import translate

logger = logging.getLogger(__name__)

FAILURE_TITLE = "Error"


class StatusApi(Protocol):
    def get_job_status(self, task_id: str) -> Any | None:
        """Return the raw status document or ``None`` on transport failure."""
        raise NotImplementedError


@dataclass(slots=True)
class JobSinks:
    """User-facing collaborators notified by the poller."""

    progress: ProgressSink
    notifier: NotificationSink
    audio: AudioSink
    display: DisplaySink


@dataclass(slots=True)
class PollOutcome:
    """Terminal result of one polling session."""

    job: Job
    state: JobState
    failure_kind: FailureKind | None = None
    document_base: DocumentBase | None = None
    ticks: int = 0


TerminalCallback = Callable[[PollOutcome], None]


class StatusPoller:
    """Polls one job until it reaches SUCCEEDED or FAILED.

    The terminal transition runs exactly once: it stops the timer, releases
    the gate, clears the scratch slot and then drives the sinks.  Ticks that
    arrive while a status query is still in flight are skipped.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        job: Job,
        api: StatusApi,
        timer: IntervalTimer,
        gate: ConcurrencyGate,
        scratch: ScratchStorage,
        sinks: JobSinks,
        base_name: str,
        attribute_order: Sequence[str] | None = None,
        on_terminal: TerminalCallback | None = None,
    ) -> None:
        self.job = job
        self._api = api
        self._timer = timer
        self._gate = gate
        self._scratch = scratch
        self._sinks = sinks
        self._base_name = base_name
        self._attribute_order = tuple(attribute_order) if attribute_order is not None else None
        self._on_terminal = on_terminal or (lambda _outcome: None)
        self._lock = threading.Lock()
        self._state = JobState.STARTING
        self._in_flight = False
        self._ticks = 0
        self._done = threading.Event()
        self.outcome: PollOutcome | None = None

    @property
    def state(self) -> JobState:
        with self._lock:
            return self._state

    @property
    def ticks(self) -> int:
        return self._ticks

    def start(self) -> None:
        logger.info("Polling %s job %s", self.job.kind.value, self.job.id)
        self._timer.start(self.tick)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the session is terminal; ``False`` on timeout."""

        return self._done.wait(timeout=timeout)

    def abandon(self) -> None:
        """Stop polling locally without a terminal transition.

        The gate stays held and the scratch slot keeps the task id, so the
        job can still be inspected with a one-shot status query.
        """

        logger.warning("Abandoning local polling of job %s in state %s", self.job.id, self.state.value)
        self._timer.stop()

    def tick(self) -> None:
        """Run one status check."""

        with self._lock:
            if self._state.is_terminal:
                return
            if self._in_flight:
                logger.debug("Skipping tick for %s: previous query still running", self.job.id)
                return
            self._in_flight = True
            self._ticks += 1

        try:
            self._check_status()
        except Exception:
            logger.exception("Status check for job %s crashed", self.job.id)
            self._fail(FailureKind.TRANSPORT_FAILURE)
        finally:
            with self._lock:
                self._in_flight = False

    def _check_status(self) -> None:
        raw = self._api.get_job_status(self.job.id)
        logger.debug("Status for %s: %r", self.job.id, raw)
        if raw is None:
            self._fail(FailureKind.TRANSPORT_FAILURE)
            return
        try:
            status = decode_job_status(raw)
        except StatusDecodeError as error:
            logger.warning("Undecodable status for job %s: %s", self.job.id, error)
            self._fail(FailureKind.TRANSPORT_FAILURE)
            return

        if status.is_failure:
            self._fail(FailureKind.SERVER_REPORTED_FAILURE)
            return
        if status.is_success:
            self._succeed(status)
            return

        with self._lock:
            if self._state.is_terminal:
                return
            self._state = JobState.POLLING
        self._sinks.progress.show(
            True,
            self.job.progress_title,
            status.progress_message(),
            self.job.id,
            locked=True,
        )

    def _enter_terminal(self, state: JobState) -> bool:
        with self._lock:
            if self._state.is_terminal:
                return False
            self._state = state
        return True

    def _release_resources(self) -> None:
        """Stop the timer, free the gate and clear the scratch slot.

        Each step runs even when an earlier one raises; failures are logged
        so the terminal sinks and ``_finish`` still run.
        """

        for step, action in (
            ("stop timer", self._timer.stop),
            ("release gate", self._gate.release),
            ("clear scratch slot", lambda: self._scratch.remove(SCRATCH_JOB_KEY)),
        ):
            try:
                action()
            except Exception:
                logger.exception("Cannot %s for job %s", step, self.job.id)

    def _fail(self, failure_kind: FailureKind) -> None:
        if not self._enter_terminal(JobState.FAILED):
            return
        logger.warning(
            "Job %s (%s %s) failed: %s",
            self.job.id,
            self.job.kind.value,
            self.job.display_name,
            failure_kind.value,
        )
        outcome = PollOutcome(
            job=self.job,
            state=JobState.FAILED,
            failure_kind=failure_kind,
            ticks=self._ticks,
        )
        try:
            self._release_resources()
            self._sinks.audio.play(AudioCue.ERROR)
            self._sinks.notifier.notify(FAILURE_TITLE, self.job.failure_message)
            self._sinks.progress.show(False)
        finally:
            self._finish(outcome)

    def _succeed(self, status: JobStatus) -> None:
        payload = None
        if status.result_payload is not None or self.job.kind.requires_document_base:
            try:
                payload = decode_document_base_payload(status.result_payload)
            except StatusDecodeError as error:
                if self.job.kind.requires_document_base:
                    logger.warning("Job %s succeeded without a usable result: %s", self.job.id, error)
                    self._fail(FailureKind.TRANSPORT_FAILURE)
                    return
                logger.info("Job %s result carries no document base: %s", self.job.id, error)

        if not self._enter_terminal(JobState.SUCCEEDED):
            return
        logger.info("Job %s (%s %s) succeeded", self.job.id, self.job.kind.value, self.job.display_name)
        outcome = PollOutcome(job=self.job, state=JobState.SUCCEEDED, ticks=self._ticks)
        try:
            self._release_resources()
            if self.job.kind.plays_success_cue:
                self._sinks.audio.play(AudioCue.SUCCESS)
            self._sinks.progress.show(False)
            if payload is not None:
                attribute_order = self._attribute_order
                if attribute_order is None:
                    attribute_order = tuple(payload.attributes or ())
                outcome.document_base = translate(
                    self._base_name,
                    attribute_order,
                    payload.nuggets,
                    self._sinks.notifier,
                )
                self._sinks.display.display(outcome.document_base)
        finally:
            self._finish(outcome)

    def _finish(self, outcome: PollOutcome) -> None:
        self.outcome = outcome
        try:
            self._on_terminal(outcome)
        finally:
            self._done.set()
