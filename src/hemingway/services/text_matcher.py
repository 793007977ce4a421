"""Find the spans of a source text that plausibly render as a target string.

Rendered page text rarely matches its source byte for byte: JSX and HTML
reflow long strings across lines, and authors encode punctuation as HTML
entities or typographic quotes. Matching therefore runs in two phases
(exact, then whitespace-normalized) and is repeated for each entity/quote
variant of the target.

All offsets are character offsets into the decoded text.
"""

import re
from typing import Dict, List

from hemingway.models.edit import Span

_WHITESPACE_RUN = re.compile(r"\s+")

CURLY_APOSTROPHE = "’"


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and trim the ends."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def entity_variants(text: str) -> List[str]:
    """Generate the encodings an author may have used for the rendered text.

    Returns, deduplicated and in this order: the raw text; the text with
    ``& ' " < >`` entity-encoded; the text with only apostrophes encoded as
    ``&apos;``; the text with straight apostrophes replaced by ``’``.

    Example:
        >>> entity_variants("don't")
        ["don't", 'don&apos;t', 'don’t']
    """
    variants = [text]

    encoded = (
        text.replace("&", "&amp;")
        .replace("'", "&apos;")
        .replace('"', "&quot;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )
    apostrophe_only = text.replace("'", "&apos;")
    curly = text.replace("'", CURLY_APOSTROPHE)

    for variant in (encoded, apostrophe_only, curly):
        if variant not in variants:
            variants.append(variant)
    return variants


def _is_word(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _exact_spans(source: str, target: str) -> List[Span]:
    spans = []
    idx = source.find(target)
    while idx != -1:
        spans.append(Span(idx, len(target)))
        idx = source.find(target, idx + len(target))
    return spans


def _match_normalized_at(source: str, start: int, needle: str) -> int:
    """Try to match the normalized needle at start.

    Returns:
        The number of source characters consumed, or -1 on mismatch
    """
    src_len = len(source)
    needle_len = len(needle)
    src_idx = start
    needle_idx = 0

    while src_idx < src_len and needle_idx < needle_len:
        src_char = source[src_idx]
        needle_char = needle[needle_idx]

        if src_char == needle_char:
            src_idx += 1
            needle_idx += 1
        elif src_char.isspace() and needle_char.isspace():
            while src_idx < src_len and source[src_idx].isspace():
                src_idx += 1
            while needle_idx < needle_len and needle[needle_idx].isspace():
                needle_idx += 1
        elif src_char.isspace():
            # Extra formatting whitespace in the source, unless it separates
            # two words the target runs together
            if _is_word(source[src_idx - 1]) and _is_word(needle_char):
                return -1
            while src_idx < src_len and source[src_idx].isspace():
                src_idx += 1
        else:
            return -1

    if needle_idx < needle_len:
        return -1
    return src_idx - start


def _normalized_spans(source: str, target: str) -> List[Span]:
    needle = normalize_whitespace(target)
    if not needle:
        return []

    spans = []
    first_char = needle[0]
    pos = source.find(first_char)
    while pos != -1:
        consumed = _match_normalized_at(source, pos, needle)
        if consumed > 0:
            spans.append(Span(pos, consumed))
        pos = source.find(first_char, pos + 1)
    return spans


def find_spans(source: str, target: str) -> List[Span]:
    """Find every span of source that represents target.

    Exact occurrences (non-overlapping, left to right) win outright; only
    when there are none does the whitespace-tolerant scan run.

    Example:
        >>> find_spans("<h1>Hello\\n    world</h1>", "Hello world")
        [Span(offset=4, length=15)]
    """
    if not target:
        return []
    spans = _exact_spans(source, target)
    if spans:
        return spans
    return _normalized_spans(source, target)


def find_all_spans(source: str, text: str) -> List[Span]:
    """Union of find_spans over every entity variant of text.

    Spans keep first-discovered order; a span found by several variants is
    reported once.
    """
    seen: Dict[Span, None] = {}
    for variant in entity_variants(text):
        for span in find_spans(source, variant):
            seen.setdefault(span, None)
    return list(seen)
