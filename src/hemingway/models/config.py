"""Configuration models for Hemingway."""

from pydantic import BaseModel, Field, field_validator
from pathlib import Path
from typing import List


DEFAULT_SOURCE_PATTERNS = [
    "components/**/*.tsx",
    "src/**/*.tsx",
    "src/**/*.ts",
    "app/**/*.tsx",
]

DEFAULT_EXCLUDE_PATTERNS = ["node_modules", ".next", "dist", "build"]


class HemingwayConfig(BaseModel):
    """Root configuration shared by the rewrite engine and its companion server.

    The engine and CLI read project_root, source_patterns, exclude_patterns
    and protected_segments. port, model and shortcut live in the same
    hemingway.yaml but are read only by the companion server and page overlay.
    """

    project_root: str = Field(
        default=".",
        description="Directory that source patterns are resolved against"
    )

    source_patterns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SOURCE_PATTERNS),
        description="Glob patterns (relative to project_root) of files that may hold page copy"
    )

    exclude_patterns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS),
        description="Directory names that are never scanned"
    )

    protected_segments: List[str] = Field(
        default_factory=lambda: ["editor"],
        description="Directory names whose files are never rewritten (the editor's own UI)"
    )

    # Companion server and overlay settings
    port: int = Field(
        default=4800,
        ge=1,
        le=65535,
        description="Companion server port"
    )

    model: str = Field(
        default="claude-sonnet-4-6",
        description="Model identifier used by the copy generator"
    )

    shortcut: str = Field(
        default="ctrl+shift+h",
        description="Keyboard shortcut that toggles the page overlay"
    )

    @field_validator("source_patterns")
    @classmethod
    def validate_source_patterns(cls, v: List[str]) -> List[str]:
        """Drop blank patterns and require at least one usable pattern."""
        patterns = [p.strip() for p in v if p and p.strip()]
        if not patterns:
            raise ValueError(
                "source_patterns must contain at least one non-empty glob pattern"
            )
        return patterns

    @field_validator("exclude_patterns", "protected_segments")
    @classmethod
    def strip_names(cls, v: List[str]) -> List[str]:
        return [name.strip() for name in v if name and name.strip()]

    @property
    def root_path(self) -> Path:
        return Path(self.project_root).expanduser().resolve()

    model_config = {"frozen": True}
