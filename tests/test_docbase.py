from __future__ import annotations

from dataclasses import FrozenInstanceError

import allure
import pytest

from docbase_tasks.tasks.docbase import DocumentBase, Nugget
from docbase_tasks.tasks.errors import NuggetValidationError

pytestmark = [
    allure.epic("Docbase Jobs"),
    allure.feature("Result Translation"),
]


def test_nugget_exposes_spanned_text() -> None:
    nugget = Nugget(document_name="d1", document_text="hello world", start_char=6, end_char=11)
    assert nugget.text == "world"


@pytest.mark.parametrize(
    ("start", "end"),
    [(0, 0), (0, 11), (11, 11), (3, 3)],
)
def test_nugget_accepts_bounds_inside_document(start: int, end: int) -> None:
    Nugget(document_name="d1", document_text="hello world", start_char=start, end_char=end)


@pytest.mark.parametrize(
    ("start", "end"),
    [(-1, 3), (5, 4), (0, 12), (12, 12)],
)
def test_nugget_rejects_out_of_bounds_span(start: int, end: int) -> None:
    with pytest.raises(NuggetValidationError, match="outside document 'd1'"):
        Nugget(document_name="d1", document_text="hello world", start_char=start, end_char=end)


def test_nugget_rejects_non_integer_offsets() -> None:
    with pytest.raises(NuggetValidationError, match="start_char must be an integer"):
        Nugget(document_name="d1", document_text="hello", start_char="0", end_char=2)  # type: ignore[arg-type]
    with pytest.raises(NuggetValidationError, match="end_char must be an integer"):
        Nugget(document_name="d1", document_text="hello", start_char=0, end_char=True)


@pytest.mark.parametrize("text", [None, 12345, b"hello"])
def test_nugget_rejects_non_string_document_text(text: object) -> None:
    with pytest.raises(NuggetValidationError, match="document_text must be a string") as excinfo:
        Nugget(document_name="d1", document_text=text, start_char=0, end_char=0)  # type: ignore[arg-type]
    assert excinfo.value.document_name == "d1"


def test_validation_error_is_a_value_error_carrying_document_name() -> None:
    with pytest.raises(ValueError) as excinfo:
        Nugget(document_name="doc-7", document_text="", start_char=0, end_char=1)
    assert isinstance(excinfo.value, NuggetValidationError)
    assert excinfo.value.document_name == "doc-7"


def test_document_base_keeps_attribute_order_as_tuple() -> None:
    attributes = ["B", "A", "C"]
    base = DocumentBase(name="Base1", attributes=attributes)
    attributes.append("D")
    assert base.attributes == ("B", "A", "C")


def test_document_base_attributes_cannot_be_reassigned() -> None:
    base = DocumentBase(name="Base1", attributes=("A", "B"))

    with pytest.raises(FrozenInstanceError):
        base.attributes = ("X",)  # type: ignore[misc]

    assert base.attributes == ("A", "B")
    base.name = "Renamed"
    assert base.name == "Renamed"


def test_add_nugget_appends_in_order_and_groups_by_document() -> None:
    base = DocumentBase(name="Base1")
    base.add_nugget("d1", "hello world", 0, 5)
    base.add_nugget("d2", "foo bar", 4, 7)
    base.add_nugget("d1", "hello world", 6, 11)

    assert [nugget.text for nugget in base.nuggets] == ["hello", "bar", "world"]
    assert base.document_names() == ["d1", "d2"]
    assert [nugget.text for nugget in base.nuggets_for("d1")] == ["hello", "world"]


def test_add_nugget_leaves_base_untouched_on_invalid_span() -> None:
    base = DocumentBase(name="Base1")
    with pytest.raises(NuggetValidationError):
        base.add_nugget("d1", "abc", 2, 10)
    assert base.nuggets == []
