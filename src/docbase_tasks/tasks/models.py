"""Domain models for document base jobs and their lifecycle."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class JobKind(str, Enum):
    """Kinds of remote jobs the service can start."""

    CREATE = "create"
    LOAD = "load"
    INTERACTIVE = "interactive"
    ORDER_NUGGETS = "order_nuggets"
    CONFIRM_MATCH = "confirm_match"
    CONFIRM_CUSTOM = "confirm_custom"

    @property
    def verb(self) -> str:
        return _KIND_WORDING[self][0]

    @property
    def gerund(self) -> str:
        return _KIND_WORDING[self][1]

    @property
    def plays_success_cue(self) -> bool:
        # Loading an existing base finishes silently.
        return self is not JobKind.LOAD

    @property
    def requires_document_base(self) -> bool:
        return self in (JobKind.CREATE, JobKind.LOAD)


_KIND_WORDING: dict[JobKind, tuple[str, str]] = {
    JobKind.CREATE: ("create", "Creating"),
    JobKind.LOAD: ("load", "Loading"),
    JobKind.INTERACTIVE: ("populate", "Populating"),
    JobKind.ORDER_NUGGETS: ("order nuggets for", "Ordering nuggets for"),
    JobKind.CONFIRM_MATCH: ("confirm nugget for", "Confirming nugget for"),
    JobKind.CONFIRM_CUSTOM: ("confirm custom nugget for", "Confirming custom nugget for"),
}


class JobState(str, Enum):
    """Client-side polling session states."""

    STARTING = "starting"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED)


class FailureKind(str, Enum):
    """Normalized failure classes surfaced by the orchestrator."""

    SUBMISSION_FAILURE = "submission_failure"
    ALREADY_RUNNING = "already_running"
    TRANSPORT_FAILURE = "transport_failure"
    SERVER_REPORTED_FAILURE = "server_reported_failure"
    NUGGET_TRANSLATION_ERROR = "nugget_translation_error"


class AudioCue(str, Enum):
    """Audio cues played on terminal transitions."""

    SUCCESS = "success"
    ERROR = "error"


class SubmissionOutcome(str, Enum):
    ACCEPTED = "accepted"
    ALREADY_RUNNING = "already_running"
    SUBMISSION_FAILED = "submission_failed"


@dataclass(slots=True, frozen=True)
class Job:
    """One remote unit of work identified by an opaque task id."""

    id: str
    kind: JobKind
    display_name: str

    @property
    def progress_title(self) -> str:
        return f"{self.kind.gerund} {self.display_name}..."

    @property
    def failure_message(self) -> str:
        return f"Failed to {self.kind.verb} {self.display_name}"


@dataclass(slots=True, frozen=True)
class JobStatus:
    """Decoded snapshot returned by the status endpoint."""

    state: str
    status_message: str | None = None
    result_payload: dict[str, Any] | None = None

    @property
    def is_failure(self) -> bool:
        return self.state.strip().lower() == "failure"

    @property
    def is_success(self) -> bool:
        return self.state == "SUCCESS"

    def progress_message(self) -> str:
        """Prefer the explicit status detail, always ending with an ellipsis."""

        message = self.status_message or self.state
        if not message.endswith("..."):
            message += "..."
        return message


@dataclass(slots=True, frozen=True)
class SubmissionResult:
    """Result of one submit attempt."""

    outcome: SubmissionOutcome
    job: Job | None = None
    failure_kind: FailureKind | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome is SubmissionOutcome.ACCEPTED


def display_name_for(base_name: str) -> str:
    return f"Docbase {base_name}"
