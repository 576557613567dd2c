from __future__ import annotations

import allure
import pytest

from docbase_tasks.tasks.contracts import (
    NuggetDescriptor,
    decode_document_base_payload,
    decode_job_status,
    read_nugget_descriptor,
)
from docbase_tasks.tasks.errors import NuggetValidationError, StatusDecodeError

pytestmark = [
    allure.epic("Docbase Jobs"),
    allure.feature("Status Contract"),
]


def test_decode_job_status_reads_state_message_and_payload() -> None:
    status = decode_job_status(
        {
            "state": "RUNNING",
            "meta": {"status": "Extracting", "document_base_to_ui": {"msg": {"nuggets": []}}},
        },
    )
    assert status.state == "RUNNING"
    assert status.status_message == "Extracting"
    assert status.result_payload == {"msg": {"nuggets": []}}


def test_decode_job_status_tolerates_missing_meta_and_empty_status() -> None:
    assert decode_job_status({"state": "PENDING"}).status_message is None
    assert decode_job_status({"state": "PENDING", "meta": {"status": ""}}).status_message is None


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ([], "Expected JSON object"),
        ("SUCCESS", "Expected JSON object"),
        ({}, "state must be a string"),
        ({"state": 3}, "state must be a string"),
        ({"state": "RUNNING", "meta": []}, "meta must be an object"),
        ({"state": "RUNNING", "meta": {"status": 5}}, "meta.status must be a string"),
        (
            {"state": "SUCCESS", "meta": {"document_base_to_ui": "done"}},
            "document_base_to_ui must be an object",
        ),
    ],
)
def test_decode_job_status_rejects_malformed_payloads(raw: object, message: str) -> None:
    with pytest.raises(StatusDecodeError, match=message):
        decode_job_status(raw)


def test_decode_document_base_payload_keeps_raw_nuggets() -> None:
    payload = decode_document_base_payload(
        {"msg": {"attributes": ["A", "B"], "nuggets": [{"broken": True}]}},
    )
    assert payload.attributes == ["A", "B"]
    assert payload.nuggets == [{"broken": True}]


def test_decode_document_base_payload_defaults() -> None:
    payload = decode_document_base_payload({"msg": {}})
    assert payload.attributes is None
    assert payload.nuggets == []


@pytest.mark.parametrize(
    "result_payload",
    [None, {}, {"msg": 1}, {"msg": {"nuggets": {}}}, {"msg": {"attributes": [1, 2]}}],
)
def test_decode_document_base_payload_rejects_unusable_shapes(result_payload) -> None:
    with pytest.raises(StatusDecodeError):
        decode_document_base_payload(result_payload)


def test_read_nugget_descriptor_checks_structure_not_bounds() -> None:
    descriptor = read_nugget_descriptor(
        {"document": {"name": "d1", "text": "abc"}, "start_char": 0, "end_char": 99},
    )
    assert descriptor == NuggetDescriptor("d1", "abc", 0, 99)


@pytest.mark.parametrize(
    "item",
    [
        None,
        {"start_char": 0, "end_char": 1},
        {"document": {"text": "abc"}, "start_char": 0, "end_char": 1},
        {"document": {"name": "d1"}, "start_char": 0, "end_char": 1},
        {"document": {"name": "d1", "text": "abc"}, "start_char": "0", "end_char": 1},
        {"document": {"name": "d1", "text": "abc"}, "start_char": 0},
    ],
)
def test_read_nugget_descriptor_rejects_malformed_entries(item) -> None:
    with pytest.raises(NuggetValidationError):
        read_nugget_descriptor(item)
