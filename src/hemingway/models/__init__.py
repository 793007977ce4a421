"""Data models for Hemingway."""

from hemingway.models.config import HemingwayConfig
from hemingway.models.edit import (
    EditContext,
    EditEntry,
    EditSnapshot,
    MatchCandidate,
    Span,
    WriteOutcome,
)

__all__ = [
    "EditContext",
    "EditEntry",
    "EditSnapshot",
    "HemingwayConfig",
    "MatchCandidate",
    "Span",
    "WriteOutcome",
]
