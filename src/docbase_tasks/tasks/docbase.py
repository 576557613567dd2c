"""Document base entities produced by successful jobs."""

from __future__ import annotations

from dataclasses import FrozenInstanceError, dataclass, field
from typing import Any

from docbase_tasks.tasks.errors import NuggetValidationError


@dataclass(slots=True, frozen=True)
class Nugget:
    """A validated text span inside one document."""

    document_name: str
    document_text: str
    start_char: int
    end_char: int

    def __post_init__(self) -> None:
        if not isinstance(self.document_text, str):
            raise NuggetValidationError(
                f"nugget.document_text must be a string, got {type(self.document_text).__name__}",
                document_name=self.document_name,
            )
        for name, value in (("start_char", self.start_char), ("end_char", self.end_char)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise NuggetValidationError(
                    f"nugget.{name} must be an integer, got {value!r}",
                    document_name=self.document_name,
                )
        if not 0 <= self.start_char <= self.end_char <= len(self.document_text):
            raise NuggetValidationError(
                f"Nugget span [{self.start_char}, {self.end_char}) is outside "
                f"document {self.document_name!r} of length {len(self.document_text)}",
                document_name=self.document_name,
            )

    @property
    def text(self) -> str:
        return self.document_text[self.start_char : self.end_char]


@dataclass(slots=True)
class DocumentBase:
    """Named collection of ordered attributes and extracted nuggets."""

    name: str
    attributes: tuple[str, ...] = ()
    nuggets: list[Nugget] = field(default_factory=list)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", tuple(self.attributes))
        self.nuggets = list(self.nuggets)

    def __setattr__(self, name: str, value: Any) -> None:
        # Attribute order is fixed once the base is built.
        if name == "attributes" and hasattr(self, "attributes"):
            raise FrozenInstanceError("DocumentBase.attributes cannot be reassigned")
        object.__setattr__(self, name, value)

    def add_nugget(
        self,
        document_name: str,
        document_text: str,
        start_char: int,
        end_char: int,
    ) -> Nugget:
        """Validate and append a nugget, raising ``NuggetValidationError`` on bad spans."""

        nugget = Nugget(
            document_name=document_name,
            document_text=document_text,
            start_char=start_char,
            end_char=end_char,
        )
        self.nuggets.append(nugget)
        return nugget

    def document_names(self) -> list[str]:
        seen: dict[str, None] = {}
        for nugget in self.nuggets:
            seen.setdefault(nugget.document_name, None)
        return list(seen)

    def nuggets_for(self, document_name: str) -> list[Nugget]:
        return [nugget for nugget in self.nuggets if nugget.document_name == document_name]
