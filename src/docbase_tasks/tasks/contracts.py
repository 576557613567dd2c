"""Validating decoders for the remote job status payload."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from docbase_tasks.tasks.errors import NuggetValidationError, StatusDecodeError
from docbase_tasks.tasks.models import JobStatus


@dataclass(slots=True, frozen=True)
class NuggetDescriptor:
    """One nugget entry of the result payload, structurally checked."""

    document_name: str
    document_text: str
    start_char: int
    end_char: int


@dataclass(slots=True)
class DocumentBasePayload:
    """Shape of ``meta.document_base_to_ui.msg`` on a successful job."""

    attributes: list[str] | None
    nuggets: list[Any] = field(default_factory=list)


def decode_job_status(raw: Any) -> JobStatus:
    """Decode and validate a status response.

    Only the fields the poller relies on are checked: ``state`` must be a
    string and ``meta`` an object when present.  The nested result payload is
    kept raw and decoded separately on success.
    """

    if not isinstance(raw, dict):
        raise StatusDecodeError(f"Expected JSON object for job status, got {type(raw).__name__}")
    state = raw.get("state")
    if not isinstance(state, str):
        raise StatusDecodeError("job_status.state must be a string")

    meta = raw.get("meta")
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise StatusDecodeError("job_status.meta must be an object when provided")

    status_message = meta.get("status")
    if status_message is not None and not isinstance(status_message, str):
        raise StatusDecodeError("job_status.meta.status must be a string when provided")

    result_payload = meta.get("document_base_to_ui")
    if result_payload is not None and not isinstance(result_payload, dict):
        raise StatusDecodeError(
            "job_status.meta.document_base_to_ui must be an object when provided",
        )

    return JobStatus(
        state=state,
        status_message=status_message or None,
        result_payload=result_payload,
    )


def decode_document_base_payload(result_payload: dict[str, Any] | None) -> DocumentBasePayload:
    """Extract attributes and raw nugget entries from a success payload."""

    if result_payload is None:
        raise StatusDecodeError("Success payload has no document_base_to_ui object")
    msg = result_payload.get("msg")
    if not isinstance(msg, dict):
        raise StatusDecodeError("document_base_to_ui.msg must be an object")

    attributes = msg.get("attributes")
    if attributes is not None:
        if not isinstance(attributes, list) or not all(isinstance(item, str) for item in attributes):
            raise StatusDecodeError("document_base_to_ui.msg.attributes must be a list of strings")

    nuggets = msg.get("nuggets")
    if nuggets is None:
        nuggets = []
    if not isinstance(nuggets, list):
        raise StatusDecodeError("document_base_to_ui.msg.nuggets must be an array")
    return DocumentBasePayload(attributes=attributes, nuggets=nuggets)


def read_nugget_descriptor(item: Any) -> NuggetDescriptor:
    """Check one raw nugget entry; span bounds are left to ``Nugget`` itself."""

    if isinstance(item, NuggetDescriptor):
        return item
    if not isinstance(item, dict):
        raise NuggetValidationError("nugget entry must be an object")
    document = item.get("document")
    if not isinstance(document, dict):
        raise NuggetValidationError("nugget.document must be an object")
    name = document.get("name")
    text = document.get("text")
    if not isinstance(name, str):
        raise NuggetValidationError("nugget.document.name must be a string")
    if not isinstance(text, str):
        raise NuggetValidationError("nugget.document.text must be a string", document_name=name)
    start_char = item.get("start_char")
    end_char = item.get("end_char")
    for field_name, value in (("start_char", start_char), ("end_char", end_char)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise NuggetValidationError(
                f"nugget.{field_name} must be an integer",
                document_name=name,
            )
    return NuggetDescriptor(
        document_name=name,
        document_text=text,
        start_char=start_char,
        end_char=end_char,
    )
