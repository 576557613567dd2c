"""Task submitter and the orchestrator owning per-application job state."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from typing import Protocol

from docbase_tasks.tasks.api import StartJobParams
from docbase_tasks.tasks.docbase import DocumentBase
from docbase_tasks.tasks.errors import DocbaseTaskError
from docbase_tasks.tasks.gate import ConcurrencyGate
from docbase_tasks.tasks.models import (
    FailureKind,
    Job,
    JobKind,
    SubmissionOutcome,
    SubmissionResult,
    display_name_for,
)
from docbase_tasks.tasks.poller import (
    FAILURE_TITLE,
    JobSinks,
    PollOutcome,
    StatusApi,
    StatusPoller,
)
from docbase_tasks.tasks.scratch import SCRATCH_JOB_KEY, ScratchStorage
from docbase_tasks.tasks.timer import IntervalTimer, ThreadingIntervalTimer

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 1.0
INITIAL_PROGRESS_DETAIL = "Please wait..."


class DocbaseApi(StatusApi, Protocol):
    def start_job(self, kind: JobKind, params: StartJobParams) -> str | None:
        """Start a remote job and return its task id, or ``None``."""
        raise NotImplementedError


TimerFactory = Callable[[], IntervalTimer]


class TaskSubmitter:
    """Starts remote jobs and hands accepted ones to a status poller."""

    def __init__(
        self,
        *,
        api: DocbaseApi,
        gate: ConcurrencyGate,
        scratch: ScratchStorage,
        sinks: JobSinks,
        timer_factory: TimerFactory,
        on_terminal: Callable[[PollOutcome], None],
    ) -> None:
        self._api = api
        self._gate = gate
        self._scratch = scratch
        self._sinks = sinks
        self._timer_factory = timer_factory
        self._on_terminal = on_terminal

    def submit(
        self,
        kind: JobKind,
        params: StartJobParams,
    ) -> tuple[SubmissionResult, StatusPoller | None]:
        display_name = display_name_for(params.base_name)
        params.to_form(kind)  # raises ValueError on incomplete parameters
        # Claimed before the remote call so concurrent submits never both reach the service.
        if not self._gate.try_acquire():
            logger.warning("Docbase task is already running, cannot start another")
            return (
                SubmissionResult(
                    outcome=SubmissionOutcome.ALREADY_RUNNING,
                    failure_kind=FailureKind.ALREADY_RUNNING,
                ),
                None,
            )

        try:
            task_id = self._api.start_job(kind, params)
        except DocbaseTaskError as error:
            logger.error("Cannot start %s job for %s: %s", kind.value, display_name, error)
            task_id = None
        except Exception:
            logger.exception("Start %s job for %s crashed", kind.value, display_name)
            task_id = None

        if not task_id:
            return self._submission_failed(kind, display_name), None

        job = Job(id=task_id, kind=kind, display_name=display_name)
        logger.info("Task: %s %s (task id %s)", kind.verb, display_name, task_id)
        try:
            self._scratch.set(SCRATCH_JOB_KEY, task_id)
            self._sinks.progress.show(True, job.progress_title, INITIAL_PROGRESS_DETAIL, task_id)
            poller = StatusPoller(
                job=job,
                api=self._api,
                timer=self._timer_factory(),
                gate=self._gate,
                scratch=self._scratch,
                sinks=self._sinks,
                base_name=params.base_name,
                attribute_order=params.attributes if kind is JobKind.CREATE else None,
                on_terminal=self._on_terminal,
            )
            poller.start()
        except Exception:
            # The remote job may keep running; locally the session never started.
            logger.exception("Cannot start polling task %s", task_id)
            result = self._submission_failed(kind, display_name)
            try:
                self._scratch.remove(SCRATCH_JOB_KEY)
            except Exception:
                logger.exception("Cannot clear scratch slot for task %s", task_id)
            return result, None
        return SubmissionResult(outcome=SubmissionOutcome.ACCEPTED, job=job), poller

    def _submission_failed(self, kind: JobKind, display_name: str) -> SubmissionResult:
        self._gate.release()
        self._sinks.notifier.notify(FAILURE_TITLE, f"Failed to {kind.verb} {display_name}")
        return SubmissionResult(
            outcome=SubmissionOutcome.SUBMISSION_FAILED,
            failure_kind=FailureKind.SUBMISSION_FAILURE,
        )


class DocbaseTaskOrchestrator:
    """Single entry point for running document base jobs.

    Construct one per application.  It owns the concurrency gate, the
    scratch slot and the last document base produced; closing the result
    display via :meth:`dismiss_result` drops that reference without
    cancelling anything remotely.
    """

    def __init__(
        self,
        *,
        api: DocbaseApi,
        sinks: JobSinks,
        scratch: ScratchStorage,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        self.gate = ConcurrencyGate()
        self.scratch = scratch
        self._lock = threading.Lock()
        self._last_result: DocumentBase | None = None
        self._last_outcome: PollOutcome | None = None
        self._poller: StatusPoller | None = None
        self._submitter = TaskSubmitter(
            api=api,
            gate=self.gate,
            scratch=scratch,
            sinks=sinks,
            timer_factory=timer_factory
            or (lambda: ThreadingIntervalTimer(poll_interval_seconds)),
            on_terminal=self._record_outcome,
        )

    # -- state ------------------------------------------------------------------

    def is_job_running(self) -> bool:
        return self.gate.is_active()

    @property
    def last_result(self) -> DocumentBase | None:
        with self._lock:
            return self._last_result

    @property
    def last_outcome(self) -> PollOutcome | None:
        with self._lock:
            return self._last_outcome

    @property
    def current_poller(self) -> StatusPoller | None:
        return self._poller

    def dismiss_result(self) -> None:
        with self._lock:
            self._last_result = None

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the most recent session to finish; ``True`` when it has."""

        poller = self._poller
        if poller is None:
            return True
        return poller.wait(timeout=timeout)

    def _record_outcome(self, outcome: PollOutcome) -> None:
        with self._lock:
            self._last_outcome = outcome
            self._last_result = outcome.document_base

    # -- job starters -------------------------------------------------------------

    def submit(self, kind: JobKind, params: StartJobParams) -> SubmissionResult:
        result, poller = self._submitter.submit(kind, params)
        if poller is not None:
            self._poller = poller
        return result

    def start_create_job(
        self,
        organization_id: int,
        base_name: str,
        document_ids: Sequence[int],
        attributes: Sequence[str],
    ) -> SubmissionResult:
        return self.submit(
            JobKind.CREATE,
            StartJobParams(
                organization_id=organization_id,
                base_name=base_name,
                document_ids=tuple(document_ids),
                attributes=tuple(attributes),
            ),
        )

    def start_load_job(self, organization_id: int, base_name: str) -> SubmissionResult:
        return self.submit(
            JobKind.LOAD,
            StartJobParams(organization_id=organization_id, base_name=base_name),
        )

    def start_interactive_job(self, organization_id: int, base_name: str) -> SubmissionResult:
        return self.submit(
            JobKind.INTERACTIVE,
            StartJobParams(organization_id=organization_id, base_name=base_name),
        )

    def start_order_nuggets_job(
        self,
        organization_id: int,
        base_name: str,
        document_name: str,
        document_content: str,
    ) -> SubmissionResult:
        return self.submit(
            JobKind.ORDER_NUGGETS,
            StartJobParams(
                organization_id=organization_id,
                base_name=base_name,
                document_name=document_name,
                document_content=document_content,
            ),
        )

    def start_confirm_match_job(  # noqa: PLR0913
        self,
        organization_id: int,
        base_name: str,
        document_name: str,
        document_content: str,
        nugget_text: str,
        start_index: int,
        end_index: int,
        interactive_task_id: str,
    ) -> SubmissionResult:
        return self.submit(
            JobKind.CONFIRM_MATCH,
            StartJobParams(
                organization_id=organization_id,
                base_name=base_name,
                document_name=document_name,
                document_content=document_content,
                nugget_text=nugget_text,
                start_index=start_index,
                end_index=end_index,
                interactive_task_id=interactive_task_id,
            ),
        )

    def start_confirm_custom_job(  # noqa: PLR0913
        self,
        organization_id: int,
        base_name: str,
        document_name: str,
        document_content: str,
        nugget_text: str,
        start_index: int,
        end_index: int,
        interactive_task_id: str,
    ) -> SubmissionResult:
        return self.submit(
            JobKind.CONFIRM_CUSTOM,
            StartJobParams(
                organization_id=organization_id,
                base_name=base_name,
                document_name=document_name,
                document_content=document_content,
                nugget_text=nugget_text,
                start_index=start_index,
                end_index=end_index,
                interactive_task_id=interactive_task_id,
            ),
        )
