"""Single-level undo for the most recent user action.

A snapshot holds the rewrites of one action (one element, or several for a
batch edit) in the order they were applied. Undo walks them backwards and
re-runs each rewrite with old and new text swapped, so every reversal goes
through the same relocate-and-score path instead of trusting a remembered
offset that earlier reversals may have shifted.
"""

from typing import Any, Callable, List, Optional

from hemingway.models.edit import EditContext, EditEntry, EditSnapshot, WriteOutcome
from hemingway.utils.logging import get_logger

logger = get_logger(__name__)

# rewriter(old_text, new_text, context) -> WriteOutcome
Rewriter = Callable[[str, str, EditContext], WriteOutcome]

# surface(element, text): restore the rendered text of an element
Surface = Callable[[Any, str], None]


def _no_surface(element: Any, text: str) -> None:
    """Surface for callers with nothing rendered (CLI, tests)."""


class EditLedger:
    """Holds the latest EditSnapshot and reverses it on demand.

    Args:
        rewriter: Performs a forward rewrite, typically a bound
            ``RewriteEngine.rewrite`` with patterns already applied
        surface: Restores an element's visible text; defaults to a no-op
    """

    def __init__(self, rewriter: Rewriter, surface: Optional[Surface] = None):
        self._rewriter = rewriter
        self._surface = surface or _no_surface
        self._snapshot: Optional[EditSnapshot] = None

    @property
    def has_snapshot(self) -> bool:
        return self._snapshot is not None

    def peek(self) -> Optional[EditSnapshot]:
        return self._snapshot

    def commit(self, entries: List[EditEntry]) -> EditSnapshot:
        """Store entries as the current snapshot, discarding any previous one.

        Args:
            entries: Entries in the order their rewrites were applied

        Returns:
            The newly stored snapshot
        """
        if self._snapshot is not None:
            logger.debug("snapshot_discarded", entries=len(self._snapshot))
        self._snapshot = EditSnapshot(entries=list(entries))
        logger.info("snapshot_committed", entries=len(entries))
        return self._snapshot

    def clear(self) -> None:
        self._snapshot = None

    def undo(self) -> Optional[EditSnapshot]:
        """Reverse the current snapshot, last applied entry first.

        Each entry's visible text is restored before its source file. Source
        reversal is only attempted for entries whose forward write succeeded.
        A failing reversal is recorded on the snapshot and the walk continues.

        Returns:
            The consumed snapshot with ``reversals`` filled in, or None when
            there is nothing to undo
        """
        snapshot = self._snapshot
        if snapshot is None:
            return None

        reversals: List[Optional[WriteOutcome]] = [None] * len(snapshot.entries)

        for index in range(len(snapshot.entries) - 1, -1, -1):
            entry = snapshot.entries[index]
            self._restore_visible(entry)

            if not entry.write_outcome.success:
                continue

            outcome = self._reverse_source(entry)
            reversals[index] = outcome
            if not outcome.success:
                logger.warning(
                    "undo_entry_failed",
                    index=index,
                    old_text=entry.old_text[:80],
                    error=outcome.error,
                )

        snapshot.reversals = reversals
        self._snapshot = None

        logger.info(
            "snapshot_undone",
            entries=len(snapshot),
            fully_reverted=snapshot.fully_reverted,
        )
        return snapshot

    def _restore_visible(self, entry: EditEntry) -> None:
        try:
            self._surface(entry.element, entry.old_text)
        except Exception as e:
            logger.error("undo_surface_failed", error=str(e))

    def _reverse_source(self, entry: EditEntry) -> WriteOutcome:
        try:
            return self._rewriter(entry.new_text, entry.old_text, entry.context)
        except Exception as e:
            logger.error("undo_rewrite_raised", error=str(e), exc_info=True)
            return WriteOutcome.failure(str(e))
