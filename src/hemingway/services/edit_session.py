"""Commit flow for page edits: write, record, undo.

An EditSession is what the editing surface talks to. Each user action (a
chosen alternative, typed custom text, an inline edit, or a multi-element
batch) becomes one snapshot in the session's ledger.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence

from hemingway.models.edit import EditContext, EditEntry, EditSnapshot, WriteOutcome
from hemingway.services.edit_ledger import EditLedger, Surface
from hemingway.services.rewrite_engine import RewriteEngine
from hemingway.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class EditRequest:
    """One element's requested change within a user action."""

    element: Any
    old_text: str
    new_text: str
    context: EditContext = field(default_factory=EditContext)


class EditSession:
    """Apply edits through a RewriteEngine and keep the latest one undoable.

    Args:
        engine: Engine that locates and rewrites source text
        include_patterns: Source glob patterns for every rewrite
        exclude_patterns: Excluded directory names for every rewrite
        surface: Sets an element's rendered text (new text on apply, old
            text on undo); defaults to a no-op
    """

    def __init__(
        self,
        engine: RewriteEngine,
        include_patterns: Sequence[str],
        exclude_patterns: Sequence[str] = (),
        surface: Optional[Surface] = None,
    ):
        self.engine = engine
        self.include_patterns = list(include_patterns)
        self.exclude_patterns = list(exclude_patterns)
        self._surface = surface
        self.ledger = EditLedger(self._rewrite, surface)

    def _rewrite(self, old_text: str, new_text: str, context: EditContext) -> WriteOutcome:
        return self.engine.rewrite(
            old_text,
            new_text,
            context,
            self.include_patterns,
            self.exclude_patterns,
        )

    def _render(self, element: Any, text: str) -> None:
        if self._surface is not None:
            self._surface(element, text)

    def apply(
        self,
        element: Any,
        old_text: str,
        new_text: str,
        context: Optional[EditContext] = None,
    ) -> Optional[EditEntry]:
        """Apply a single-element edit and make it the undoable action.

        Returns:
            The recorded entry, or None if new_text equals old_text (no-op,
            ledger untouched)
        """
        if new_text == old_text:
            return None
        entries = self.apply_batch([EditRequest(element, old_text, new_text, context or EditContext())])
        return entries[0]

    def apply_batch(self, requests: Iterable[EditRequest]) -> List[EditEntry]:
        """Apply several element edits as one undoable action.

        Every element is re-rendered first, then source rewrites run strictly
        in request order, one at a time, since several texts may live in the
        same file and each rewrite must see the previous one's result.

        Returns:
            One entry per request, in application order
        """
        requests = list(requests)
        for request in requests:
            self._render(request.element, request.new_text)

        entries = []
        for request in requests:
            outcome = self._rewrite(request.old_text, request.new_text, request.context)
            entries.append(
                EditEntry(
                    element=request.element,
                    old_text=request.old_text,
                    new_text=request.new_text,
                    write_outcome=outcome,
                    context=request.context,
                )
            )

        self.ledger.commit(entries)
        logger.info(
            "edits_applied",
            count=len(entries),
            succeeded=sum(1 for e in entries if e.write_outcome.success),
        )
        return entries

    def undo(self) -> Optional[EditSnapshot]:
        """Undo the most recent action (see EditLedger.undo)."""
        return self.ledger.undo()

    @property
    def can_undo(self) -> bool:
        return self.ledger.has_snapshot


def all_succeeded(entries: Iterable[EditEntry]) -> bool:
    """True if every entry's source write succeeded.

    Callers fall back to copying the new text to the clipboard otherwise.
    """
    return all(entry.write_outcome.success for entry in entries)
