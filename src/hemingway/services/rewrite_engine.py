"""Relocate rendered text in the project's source files and rewrite it.

A rewrite request carries only what the page shows: the old text, the new
text and a few structural hints about the element. The engine scans every
file selected by the source patterns, collects every span that plausibly
renders as the old text (in any entity/quote encoding), ranks them by the
surrounding markup, and splices the new text into the best one while keeping
the encoding style the author used.

Every failure is returned as a WriteOutcome; nothing is raised to the caller.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from hemingway.models.edit import EditContext, MatchCandidate, WriteOutcome
from hemingway.services import match_scorer
from hemingway.services.exceptions import (
    ConfigurationError,
    FileModifiedError,
    HemingwayError,
    NotFoundError,
    WriteIOError,
)
from hemingway.services.file_monitor import FileMonitor
from hemingway.services.file_operations import atomic_write, read_source
from hemingway.services.glob_resolver import resolve_files
from hemingway.services.text_matcher import CURLY_APOSTROPHE, find_all_spans
from hemingway.utils.logging import get_logger

logger = get_logger(__name__)

# (marker found in the original span, raw character, encoded form).
# Ampersand comes first so later encodings are not double-encoded.
ENCODINGS: Sequence[Tuple[str, str, str]] = (
    ("&amp;", "&", "&amp;"),
    ("&apos;", "'", "&apos;"),
    ("&quot;", '"', "&quot;"),
    ("&lt;", "<", "&lt;"),
    ("&gt;", ">", "&gt;"),
    (CURLY_APOSTROPHE, "'", CURLY_APOSTROPHE),
)


def line_number(source: str, offset: int) -> int:
    """1-based line of offset: newlines strictly before it, plus one."""
    return source.count("\n", 0, offset) + 1


def encode_like(original_span: str, new_text: str) -> str:
    """Apply to new_text exactly the encodings present in original_span.

    Example:
        >>> encode_like("don&apos;t stop", "won't stop")
        'won&apos;t stop'
        >>> encode_like("Fast & simple", "Fast & cheap")
        'Fast & cheap'
    """
    replacement = new_text
    for marker, raw, encoded in ENCODINGS:
        if marker in original_span:
            replacement = replacement.replace(raw, encoded)
    return replacement


class RewriteEngine:
    """Scan, match, score and rewrite text spans under one project root.

    Args:
        project_root: Directory that include patterns are resolved against
        protected_segments: Directory names whose files are never touched
            (the editor's own UI, when co-located with the page source)
        file_monitor: Tracks mtimes between the pre-write read and the
            rename (one is created if not given)
    """

    def __init__(
        self,
        project_root: Path,
        protected_segments: Iterable[str] = ("editor",),
        file_monitor: Optional[FileMonitor] = None,
    ):
        self.project_root = Path(project_root).resolve()
        self.protected_segments = frozenset(protected_segments)
        self.file_monitor = file_monitor or FileMonitor()

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.project_root).as_posix()

    def _is_protected(self, path: Path) -> bool:
        directories = path.relative_to(self.project_root).parts[:-1]
        return any(part in self.protected_segments for part in directories)

    def locate(
        self,
        old_text: str,
        context: EditContext,
        include_patterns: Iterable[str],
        exclude_patterns: Iterable[str] = (),
    ) -> List[MatchCandidate]:
        """Find and rank every candidate span for old_text.

        Returns:
            Candidates sorted by score (highest first, discovery order on ties)

        Raises:
            ConfigurationError: If the patterns or project root are unusable
        """
        files = resolve_files(self.project_root, include_patterns, exclude_patterns)

        candidates: List[MatchCandidate] = []
        for path in files:
            if self._is_protected(path):
                logger.debug("protected_file_skipped", file=self._relative(path))
                continue

            try:
                source = read_source(path)
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("source_file_unreadable", file=str(path), error=str(e))
                continue

            for span in find_all_spans(source, old_text):
                candidates.append(
                    MatchCandidate(
                        file=path,
                        offset=span.offset,
                        length=span.length,
                        line=line_number(source, span.offset),
                        original_span=source[span.offset:span.end],
                        score=match_scorer.score(source, span.offset, span.length, context),
                    )
                )

        logger.debug("candidates_found", count=len(candidates), files=len(files))
        return match_scorer.rank(candidates)

    def rewrite(
        self,
        old_text: str,
        new_text: str,
        context: Optional[EditContext],
        include_patterns: Iterable[str],
        exclude_patterns: Iterable[str] = (),
    ) -> WriteOutcome:
        """Replace the best-scoring occurrence of old_text with new_text.

        Args:
            old_text: Text as currently rendered on the page
            new_text: Replacement text (raw, unencoded)
            context: Structural hints about the edited element
            include_patterns: Source glob patterns
            exclude_patterns: Excluded directory names

        Returns:
            WriteOutcome with file, line and match count on success, or an
            error description on failure
        """
        if not old_text or not new_text or old_text == new_text:
            return WriteOutcome.failure("oldText and newText are required and must differ")

        context = context or EditContext()

        try:
            candidates = self.locate(old_text, context, include_patterns, exclude_patterns)
            if not candidates:
                raise NotFoundError(old_text)

            best = candidates[0]
            if len(candidates) > 1:
                logger.warning(
                    "ambiguous_match",
                    match_count=len(candidates),
                    score=best.score,
                    runner_up_score=candidates[1].score,
                    file=self._relative(best.file),
                    line=best.line,
                )

            line = self._write(best, encode_like(best.original_span, new_text))

        except NotFoundError as e:
            logger.info("text_not_found", search_text=old_text[:80])
            return WriteOutcome.failure(str(e))

        except ConfigurationError as e:
            logger.error("rewrite_configuration_error", error=str(e))
            return WriteOutcome.failure(str(e))

        except HemingwayError as e:
            logger.error("rewrite_failed", error=str(e))
            return WriteOutcome.failure(str(e))

        except Exception as e:
            logger.error("rewrite_unexpected_error", error=str(e), exc_info=True)
            return WriteOutcome.failure(f"Failed to rewrite source: {e}")

        relative_path = self._relative(best.file)
        logger.info(
            "rewrite_success",
            file=relative_path,
            line=line,
            match_count=len(candidates),
        )
        return WriteOutcome(
            success=True,
            file=relative_path,
            line=line,
            match_count=len(candidates),
        )

    def _write(self, best: MatchCandidate, replacement: str) -> int:
        """Splice replacement into a fresh read of the winning file.

        Returns:
            The 1-based line of the span actually replaced

        Raises:
            FileModifiedError: If the span is gone from the fresh content or
                the file changes while being written
            WriteIOError: On read/write failures
        """
        path = best.file
        try:
            # Baseline for the late check in atomic_write, taken before the read
            self.file_monitor.record(path)
            source = read_source(path)
        except (OSError, UnicodeDecodeError) as e:
            raise WriteIOError(self._relative(path), str(e)) from e

        try:
            offset = best.offset
            if source[offset:offset + best.length] != best.original_span:
                logger.info("file_modified_relocate", file=self._relative(path), offset=offset)
                offset = _nearest_occurrence(source, best.original_span, offset)
                if offset == -1:
                    raise FileModifiedError(
                        self._relative(path),
                        "Matched text disappeared before write"
                    )

            modified = source[:offset] + replacement + source[offset + best.length:]

            try:
                atomic_write(path, modified, self.file_monitor)
            except FileModifiedError:
                raise
            except OSError as e:
                raise WriteIOError(self._relative(path), str(e)) from e
        finally:
            self.file_monitor.forget(path)

        return line_number(source, offset)


def _nearest_occurrence(source: str, text: str, offset: int) -> int:
    """Offset of the exact occurrence of text closest to offset, or -1."""
    best = -1
    idx = source.find(text)
    while idx != -1:
        if best == -1 or abs(idx - offset) < abs(best - offset):
            best = idx
        idx = source.find(text, idx + 1)
    return best
