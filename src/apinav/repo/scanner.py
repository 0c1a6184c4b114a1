from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from apinav.repo.ignore import is_excluded, should_ignore_dir


def list_source_files(
    repo_path: Path,
    extensions: Iterable[str],
    exclude_patterns: Iterable[str] = (),
    max_files: int | None = None,
) -> list[str]:
    """
    Return absolute file paths (as strings) under repo_path whose extension is in
    `extensions` and whose path contains none of `exclude_patterns`.
    Deterministic: directories and files are visited in sorted order.
    """
    suffixes = {"." + ext.lstrip(".").lower() for ext in extensions}
    excludes = [p for p in exclude_patterns if p]
    if not suffixes:
        return []

    out: list[str] = []
    for root, dirs, files in _walk(repo_path):
        root_p = Path(root)

        # prune ignored dirs, and dirs whose path already hits an exclude pattern
        dirs[:] = sorted(
            d
            for d in dirs
            if not should_ignore_dir(root_p / d) and not is_excluded(str(root_p / d), excludes)
        )

        for f in sorted(files):
            if Path(f).suffix.lower() not in suffixes:
                continue
            full = str((root_p / f).resolve())
            if is_excluded(full, excludes):
                continue
            out.append(full)
            if max_files is not None and len(out) >= max_files:
                return out
    return out


def _walk(repo_path: Path):
    return os.walk(repo_path)


def read_text_file(path: str | Path) -> str:
    """Read a source file as UTF-8. Raises OSError if it is missing or unreadable."""
    data = Path(path).read_bytes()
    return data.decode("utf-8", errors="ignore")


def file_contains_any(path: str | Path, needles: list[str], max_bytes: int = 200_000) -> bool:
    """Check the head of a file for any of `needles`. Raises OSError on read failure."""
    with open(path, "rb") as f:
        data = f.read(max_bytes)
    text = data.decode("utf-8", errors="ignore")
    return any(n in text for n in needles)
