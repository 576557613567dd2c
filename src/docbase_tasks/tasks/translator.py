"""Translate a successful job payload into a ``DocumentBase``."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from docbase_tasks.tasks.contracts import read_nugget_descriptor
from docbase_tasks.tasks.docbase import DocumentBase
from docbase_tasks.tasks.errors import NuggetValidationError
from docbase_tasks.tasks.models import FailureKind
from docbase_tasks.tasks.sinks import NotificationSink

logger = logging.getLogger(__name__)

TRANSLATION_ERROR_TITLE = "Error"
TRANSLATION_ERROR_MESSAGE = "Something went wrong translating the nuggets."


def translate(
    base_name: str,
    attribute_order: Sequence[str],
    nugget_descriptors: Iterable[Any],
    notifier: NotificationSink,
) -> DocumentBase:
    """Build a document base, skipping nuggets that fail validation.

    Each rejected descriptor produces one notification; the remaining
    descriptors are still translated in their original order.
    """

    document_base = DocumentBase(name=base_name, attributes=tuple(attribute_order))
    skipped = 0
    for index, raw in enumerate(nugget_descriptors):
        try:
            descriptor = read_nugget_descriptor(raw)
            document_base.add_nugget(
                descriptor.document_name,
                descriptor.document_text,
                descriptor.start_char,
                descriptor.end_char,
            )
        except NuggetValidationError as error:
            skipped += 1
            logger.warning(
                "Skipping nugget #%d of %s (%s): %s",
                index,
                base_name,
                FailureKind.NUGGET_TRANSLATION_ERROR.value,
                error,
            )
            notifier.notify(TRANSLATION_ERROR_TITLE, TRANSLATION_ERROR_MESSAGE)

    logger.info(
        "Translated docbase %s: nuggets=%d skipped=%d",
        base_name,
        len(document_base.nuggets),
        skipped,
    )
    return document_base
