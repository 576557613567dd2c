"""Collaborator interfaces driven by the orchestrator, plus console implementations."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

from docbase_tasks.tasks.models import AudioCue

if TYPE_CHECKING:
    from docbase_tasks.tasks.docbase import DocumentBase

logger = logging.getLogger(__name__)


class ProgressSink(Protocol):
    """Non-terminal progress display."""

    def show(
        self,
        active: bool,
        title: str = "",
        detail: str = "",
        job_id: str | None = None,
        locked: bool = False,
    ) -> None:
        """Show (``active=True``) or hide the progress display."""
        raise NotImplementedError


class NotificationSink(Protocol):
    """User-visible notifications."""

    def notify(self, title: str, message: str) -> None:
        """Show one notification."""
        raise NotImplementedError


class AudioSink(Protocol):
    """Audio feedback on terminal transitions."""

    def play(self, cue: AudioCue) -> None:
        """Play the given cue."""
        raise NotImplementedError


class DisplaySink(Protocol):
    """Receives a fully built document base."""

    def display(self, document_base: DocumentBase) -> None:
        """Present the document base to the user."""
        raise NotImplementedError


Emit = Callable[[str], None]


class ConsoleProgressSink:
    """Prints progress lines, collapsing repeated identical updates."""

    def __init__(self, emit: Emit) -> None:
        self._emit = emit
        self._last: tuple[str, str] | None = None

    def show(
        self,
        active: bool,
        title: str = "",
        detail: str = "",
        job_id: str | None = None,
        locked: bool = False,
    ) -> None:
        if not active:
            self._last = None
            return
        if self._last == (title, detail):
            return
        self._last = (title, detail)
        suffix = f" [task {job_id}]" if job_id else ""
        self._emit(f"{title} {detail}{suffix}")


class ConsoleNotificationSink:
    def __init__(self, emit: Emit) -> None:
        self._emit = emit

    def notify(self, title: str, message: str) -> None:
        self._emit(f"{title}: {message}")


class ConsoleAudioSink:
    """Rings the terminal bell for errors; successes stay quiet unless asked."""

    def __init__(self, emit: Emit, *, bell_on_success: bool = False) -> None:
        self._emit = emit
        self._bell_on_success = bell_on_success

    def play(self, cue: AudioCue) -> None:
        logger.debug("Audio cue: %s", cue.value)
        if cue is AudioCue.ERROR or self._bell_on_success:
            self._emit("\a")


class ConsoleDisplaySink:
    """Renders a short summary of a document base."""

    def __init__(self, emit: Emit, *, max_nuggets: int = 10) -> None:
        self._emit = emit
        self._max_nuggets = max_nuggets

    def display(self, document_base: DocumentBase) -> None:
        for line in render_document_base(document_base, max_nuggets=self._max_nuggets):
            self._emit(line)


def render_document_base(document_base: DocumentBase, *, max_nuggets: int = 10) -> list[str]:
    """Human readable summary lines for CLI output."""

    lines = [
        f"Docbase: {document_base.name}",
        "Attributes: " + (", ".join(document_base.attributes) or "-"),
        f"Nuggets: {len(document_base.nuggets)} "
        f"across {len(document_base.document_names())} document(s)",
    ]
    for nugget in document_base.nuggets[:max_nuggets]:
        lines.append(
            f"- {nugget.document_name} [{nugget.start_char}:{nugget.end_char}] {nugget.text!r}",
        )
    hidden = len(document_base.nuggets) - max_nuggets
    if hidden > 0:
        lines.append(f"... {hidden} more")
    return lines
