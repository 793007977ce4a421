"""Rank textually identical matches by nearby markup.

The same label ("Get Started", "Learn more") often appears several times
across a project. The scorer looks at the markup surrounding each candidate
and rewards locales that mention the edited element's tag, classes and parent
tag. It is a heuristic for picking one plausible location, not a proof.
"""

import re
from typing import List

from hemingway.models.edit import EditContext, MatchCandidate

LOCALE_RADIUS = 200

TAG_POINTS = 10
CLASS_POINTS = 5
PARENT_TAG_POINTS = 3
MAX_CLASSES = 3


def locale(source: str, offset: int, length: int) -> str:
    """Return the text window of LOCALE_RADIUS characters around a span."""
    start = max(0, offset - LOCALE_RADIUS)
    # Measured from the span end, so long spans still see their closing markup
    return source[start:offset + length + LOCALE_RADIUS]


def _has_opening_tag(text: str, tag: str) -> bool:
    return re.search(rf"<{re.escape(tag)}[\s>]", text, re.IGNORECASE) is not None


def score(source: str, offset: int, length: int, context: EditContext) -> int:
    """Score a span by how well its surroundings fit the edit context.

    - +10 if an opening tag for ``context.tag_name`` is nearby
    - +5 for each of the first three classes that appears verbatim nearby
    - +3 if an opening tag for ``context.parent_tag`` is nearby

    Empty context fields contribute nothing.
    """
    window = locale(source, offset, length)
    points = 0

    if context.tag_name and _has_opening_tag(window, context.tag_name):
        points += TAG_POINTS

    for class_name in context.class_name.split()[:MAX_CLASSES]:
        if class_name in window:
            points += CLASS_POINTS

    if context.parent_tag and _has_opening_tag(window, context.parent_tag):
        points += PARENT_TAG_POINTS

    return points


def rank(candidates: List[MatchCandidate]) -> List[MatchCandidate]:
    """Sort candidates by score, highest first, keeping discovery order on ties."""
    return sorted(candidates, key=lambda c: c.score, reverse=True)
