from __future__ import annotations

from pathlib import Path
from typing import Iterable

# never worth descending into, whatever the scanner config says
DEFAULT_IGNORES = {
    ".git",
    ".hg",
    ".svn",
    "__pycache__",
    ".mypy_cache",
    ".ruff_cache",
    ".pytest_cache",
    ".idea",
    ".vscode",
}

# dependency trees that hold other people's manifests
DEPENDENCY_DIRS = {
    "node_modules",
    "vendor",
    ".venv",
    "venv",
    "target",
    "build",
    "dist",
}


def should_ignore_dir(dir_path: Path) -> bool:
    return dir_path.name in DEFAULT_IGNORES


def is_excluded(path: str, exclude_patterns: Iterable[str]) -> bool:
    """Substring match of any exclude pattern against the full path."""
    return any(pattern and pattern in path for pattern in exclude_patterns)
