"""Controllers for document base job CLI commands."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import httpx

from docbase_tasks.config import Settings
from docbase_tasks.tasks.api import DocbaseApiClient, StartJobParams
from docbase_tasks.tasks.contracts import decode_job_status
from docbase_tasks.tasks.errors import StatusDecodeError
from docbase_tasks.tasks.models import JobKind, JobState
from docbase_tasks.tasks.orchestrator import DocbaseTaskOrchestrator
from docbase_tasks.tasks.poller import JobSinks
from docbase_tasks.tasks.scratch import SCRATCH_JOB_KEY, JsonFileScratchStorage
from docbase_tasks.tasks.sinks import (
    ConsoleAudioSink,
    ConsoleDisplaySink,
    ConsoleNotificationSink,
    ConsoleProgressSink,
)

Emit = Callable[[str], None]


@dataclass(slots=True)
class DocbaseJobCommand:
    """CLI input for starting one job and waiting for it."""

    kind: JobKind
    organization_id: int
    base_name: str
    scratch_path: Path | None = None
    document_ids: tuple[int, ...] = ()
    attributes: tuple[str, ...] = ()
    document_name: str | None = None
    document_content: str | None = None
    nugget_text: str | None = None
    start_index: int | None = None
    end_index: int | None = None
    interactive_task_id: str | None = None
    max_nuggets: int = 10

    def to_params(self) -> StartJobParams:
        return StartJobParams(
            organization_id=self.organization_id,
            base_name=self.base_name,
            document_ids=self.document_ids,
            attributes=self.attributes,
            document_name=self.document_name,
            document_content=self.document_content,
            nugget_text=self.nugget_text,
            start_index=self.start_index,
            end_index=self.end_index,
            interactive_task_id=self.interactive_task_id,
        )


@dataclass(slots=True)
class DocbaseStatusCommand:
    """CLI input for a one-shot status query."""

    task_id: str | None
    scratch_path: Path | None = None


@dataclass(slots=True)
class DocbaseCliResult:
    """Lines to render plus overall success."""

    lines: list[str]
    success: bool


class DocbaseCliController:
    """Runs jobs through the orchestrator with console sinks."""

    def __init__(
        self,
        *,
        emit: Emit | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._emit = emit or (lambda _line: None)
        self._transport = transport

    def run_job(self, command: DocbaseJobCommand) -> DocbaseCliResult:
        settings = Settings.from_env(scratch_path=command.scratch_path)
        try:
            settings.validate_for_jobs()
        except ValueError as error:
            return DocbaseCliResult(lines=[str(error)], success=False)

        with self._api_client(settings) as api:
            orchestrator = DocbaseTaskOrchestrator(
                api=api,
                sinks=JobSinks(
                    progress=ConsoleProgressSink(self._emit),
                    notifier=ConsoleNotificationSink(self._emit),
                    audio=ConsoleAudioSink(self._emit),
                    display=ConsoleDisplaySink(self._emit, max_nuggets=command.max_nuggets),
                ),
                scratch=JsonFileScratchStorage(settings.scratch_path),
                poll_interval_seconds=settings.polling.interval_seconds,
            )
            try:
                submission = orchestrator.submit(command.kind, command.to_params())
            except ValueError as error:
                return DocbaseCliResult(lines=[str(error)], success=False)
            if not submission.accepted or submission.job is None:
                return DocbaseCliResult(
                    lines=[f"Job not started: {submission.outcome.value}"],
                    success=False,
                )

            job = submission.job
            if not orchestrator.wait(timeout=settings.polling.job_timeout_seconds):
                poller = orchestrator.current_poller
                if poller is not None:
                    # Local wait limit only; the remote job keeps running.
                    poller.abandon()
                return DocbaseCliResult(
                    lines=[
                        f"Gave up waiting for task {job.id} after "
                        f"{settings.polling.job_timeout_seconds:g}s; it may still be running.",
                    ],
                    success=False,
                )

            outcome = orchestrator.last_outcome
            if outcome is None or outcome.state is not JobState.SUCCEEDED:
                failure = outcome.failure_kind.value if outcome and outcome.failure_kind else "unknown"
                return DocbaseCliResult(
                    lines=[f"Task {job.id} failed: {failure}"],
                    success=False,
                )
            return DocbaseCliResult(
                lines=[
                    f"Task {job.id} succeeded: kind={job.kind.value} polls={outcome.ticks}",
                ],
                success=True,
            )

    def status(self, command: DocbaseStatusCommand) -> DocbaseCliResult:
        settings = Settings.from_env(scratch_path=command.scratch_path)
        try:
            settings.validate_for_jobs()
        except ValueError as error:
            return DocbaseCliResult(lines=[str(error)], success=False)

        task_id = command.task_id
        if task_id is None:
            task_id = JsonFileScratchStorage(settings.scratch_path).get(SCRATCH_JOB_KEY)
        if not task_id:
            return DocbaseCliResult(
                lines=["No task id given and no in-flight task recorded."],
                success=False,
            )

        with self._api_client(settings) as api:
            raw = api.get_job_status(task_id)
        if raw is None:
            return DocbaseCliResult(lines=[f"Task {task_id}: status unavailable"], success=False)
        try:
            status = decode_job_status(raw)
        except StatusDecodeError as error:
            return DocbaseCliResult(lines=[f"Task {task_id}: {error}"], success=False)

        lines = [f"Task {task_id}: state={status.state}"]
        if status.status_message:
            lines.append(f"Status: {status.status_message}")
        if status.result_payload is not None:
            lines.append("Result: document base available")
        return DocbaseCliResult(lines=lines, success=not status.is_failure)

    @contextmanager
    def _api_client(self, settings: Settings) -> Iterator[DocbaseApiClient]:
        client = DocbaseApiClient(
            settings.api.base_url,
            auth_token=settings.api.auth_token,
            timeout_seconds=settings.api.request_timeout_seconds,
            max_retries=settings.api.max_retries,
            transport=self._transport,
        )
        try:
            yield client
        finally:
            client.close()
