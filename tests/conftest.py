"""Shared test fixtures for all test modules."""

from pathlib import Path
from typing import Callable

import pytest

from hemingway.services.rewrite_engine import RewriteEngine


@pytest.fixture
def project(tmp_path) -> Path:
    """Empty project root directory."""
    root = tmp_path / "site"
    root.mkdir()
    return root


@pytest.fixture
def write_file(project) -> Callable[[str, str], Path]:
    """
    Create a file under the project root, making parent directories.

    Content is written with newline="" so tests control line endings exactly.
    """

    def _write(relative_path: str, content: str) -> Path:
        path = project / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        return path

    return _write


@pytest.fixture
def engine(project) -> RewriteEngine:
    return RewriteEngine(project)


@pytest.fixture(scope="session")
def log_dir(tmp_path_factory) -> Path:
    """One log directory for every CLI invocation in the run."""
    return tmp_path_factory.mktemp("logs")
