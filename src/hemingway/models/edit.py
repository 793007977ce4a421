"""Models for locating and rewriting rendered text in source files."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field


class EditContext(BaseModel):
    """Structural hints about the page element whose text is being edited.

    Used only to rank competing matches, never to locate them. Every field
    is always present; an empty string means "no hint".
    """

    tag_name: str = Field(
        default="",
        description="Lower-case tag name of the edited element (e.g. 'button')"
    )

    class_name: str = Field(
        default="",
        description="Space-separated class list of the edited element"
    )

    parent_tag: str = Field(
        default="",
        description="Lower-case tag name of the element's parent"
    )

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "EditContext":
        """Build a context from the camelCase wire shape.

        Missing keys and None values become empty strings.

        Example:
            >>> EditContext.from_dict({"tagName": "button", "className": "cta"})
            EditContext(tag_name='button', class_name='cta', parent_tag='')
        """
        data = data or {}
        return cls(
            tag_name=data.get("tagName") or "",
            class_name=data.get("className") or "",
            parent_tag=data.get("parentTag") or "",
        )

    model_config = {"frozen": True}


class WriteOutcome(BaseModel):
    """Result of one rewrite attempt. Immutable once produced."""

    success: bool = Field(
        ...,
        description="Whether the replacement was written to disk"
    )

    file: Optional[str] = Field(
        default=None,
        description="Project-relative path of the rewritten file"
    )

    line: Optional[int] = Field(
        default=None,
        ge=1,
        description="1-based line number where the replaced span started"
    )

    match_count: Optional[int] = Field(
        default=None,
        ge=1,
        description="How many candidate spans were found across all files"
    )

    error: Optional[str] = Field(
        default=None,
        description="Failure description when success is False"
    )

    @classmethod
    def failure(cls, error: str) -> "WriteOutcome":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Render the outcome in the wire shape, omitting absent fields."""
        data = {
            "success": self.success,
            "file": self.file,
            "line": self.line,
            "matchCount": self.match_count,
            "error": self.error,
        }
        return {key: value for key, value in data.items() if value is not None}

    model_config = {"frozen": True}


@dataclass(frozen=True)
class Span:
    """A contiguous character range [offset, offset + length) in a text."""

    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


@dataclass
class MatchCandidate:
    """One plausible location of the search text, found during a single request.

    Attributes:
        file: Absolute path of the file holding the span
        offset: Character offset of the span in the file's text
        length: Character length of the span
        line: 1-based line number of the span start
        original_span: The exact source text covered by the span
        score: Context score assigned by the match scorer
    """

    file: Path
    offset: int
    length: int
    line: int
    original_span: str
    score: int = 0


@dataclass
class EditEntry:
    """One attempted rewrite of one page element.

    The element handle is opaque to the core; it is only handed back to the
    rendering surface when the edit is undone.
    """

    element: Any
    old_text: str
    new_text: str
    write_outcome: WriteOutcome
    context: EditContext = field(default_factory=EditContext)


@dataclass
class EditSnapshot:
    """Ordered entries produced by one user action, the unit of undo.

    Entries are kept in the order their rewrites were applied. Once the
    snapshot has been undone, ``reversals`` holds one outcome per entry in
    entry order (None for entries whose forward write had failed, since
    their source file was never touched).
    """

    entries: List[EditEntry]
    reversals: List[Optional[WriteOutcome]] = field(default_factory=list)

    @property
    def fully_reverted(self) -> bool:
        """True unless a source file could not be restored during undo."""
        return all(outcome is None or outcome.success for outcome in self.reversals)

    @property
    def failed_reversals(self) -> List[EditEntry]:
        return [
            entry
            for entry, outcome in zip(self.entries, self.reversals)
            if outcome is not None and not outcome.success
        ]

    def __len__(self) -> int:
        return len(self.entries)
