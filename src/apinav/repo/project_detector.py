from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Callable, Iterable

from apinav.domain.models import ProjectType
from apinav.repo.ignore import DEPENDENCY_DIRS, should_ignore_dir
from apinav.repo.scanner import file_contains_any

logger = logging.getLogger(__name__)

MAX_MANIFEST_DEPTH = 3

SPRING_MARKERS = ["spring-boot-starter-web"]  # also matches -webflux
GIN_MARKERS = ["github.com/gin-gonic/gin"]
ECHO_MARKERS = ["github.com/labstack/echo"]

PYTHON_MANIFESTS = ("pyproject.toml", "Pipfile", "setup.py", "setup.cfg")


class DetectionError(Exception):
    """A manifest exists but could not be read or parsed."""


def detect_project_type(root: Path, max_depth: int = MAX_MANIFEST_DEPTH) -> ProjectType:
    """
    Pick the ecosystem for a workspace root from its manifests.

    Priority: build manifest (pom.xml, build.gradle[.kts]) -> package.json ->
    go.mod -> python manifests. The first manifest carrying a known dependency
    marker wins. Any read/parse failure yields "unknown".
    """
    root = Path(root)
    try:
        for detect in _DETECTORS:
            found = detect(root, max_depth)
            if found is not None:
                logger.debug("Detected %s project at %s", found, root)
                return found
    except DetectionError as exc:
        logger.warning("Project type detection failed for %s: %s", root, exc)
    return "unknown"


def _detect_spring(root: Path, max_depth: int) -> ProjectType | None:
    names = {"pom.xml", "build.gradle", "build.gradle.kts"}
    for manifest in find_manifests(root, names.__contains__, max_depth):
        if _contains_any(manifest, SPRING_MARKERS):
            return "spring_boot"
    return None


def _detect_node(root: Path, max_depth: int) -> ProjectType | None:
    for manifest in find_manifests(root, "package.json".__eq__, max_depth):
        deps = _package_dependencies(manifest)
        # Nest apps usually depend on express as well
        if "@nestjs/core" in deps:
            return "nest"
        if "express" in deps:
            return "express"
    return None


def _detect_go(root: Path, max_depth: int) -> ProjectType | None:
    for manifest in find_manifests(root, "go.mod".__eq__, max_depth):
        if _contains_any(manifest, GIN_MARKERS):
            return "gin"
        if _contains_any(manifest, ECHO_MARKERS):
            return "echo"
    return None


def _detect_python(root: Path, max_depth: int) -> ProjectType | None:
    for manifest in find_manifests(root, _is_python_manifest, max_depth):
        try:
            text = manifest.read_text(encoding="utf-8", errors="ignore").lower()
        except OSError as exc:
            raise DetectionError(f"cannot read {manifest}: {exc}") from exc
        if "fastapi" in text:
            return "fastapi"
    return None


_DETECTORS: list[Callable[[Path, int], ProjectType | None]] = [
    _detect_spring,
    _detect_node,
    _detect_go,
    _detect_python,
]


def _is_python_manifest(name: str) -> bool:
    if name in PYTHON_MANIFESTS:
        return True
    return name.startswith("requirements") and name.endswith(".txt")


def find_manifests(
    root: Path, match: Callable[[str], bool], max_depth: int = MAX_MANIFEST_DEPTH
) -> Iterable[Path]:
    """
    Yield manifest files accepted by `match`, root directory first, then
    breadth-wise into subdirectories up to `max_depth`, skipping dependency trees.
    """
    level = [root]
    for depth in range(max_depth + 1):
        next_level: list[Path] = []
        for directory in level:
            try:
                entries = sorted(os.scandir(directory), key=lambda e: e.name)
            except OSError as exc:
                if directory == root:
                    raise DetectionError(f"cannot list {root}: {exc}") from exc
                continue
            for entry in entries:
                if entry.is_file() and match(entry.name):
                    yield Path(entry.path)
                elif entry.is_dir() and depth < max_depth:
                    p = Path(entry.path)
                    if should_ignore_dir(p) or entry.name in DEPENDENCY_DIRS:
                        continue
                    next_level.append(p)
        level = next_level


def _contains_any(manifest: Path, needles: list[str]) -> bool:
    try:
        return file_contains_any(manifest, needles, max_bytes=2_000_000)
    except OSError as exc:
        raise DetectionError(f"cannot read {manifest}: {exc}") from exc


def _package_dependencies(manifest: Path) -> dict:
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except OSError as exc:
        raise DetectionError(f"cannot read {manifest}: {exc}") from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DetectionError(f"malformed {manifest}: {exc}") from exc
    if not isinstance(data, dict):
        raise DetectionError(f"malformed {manifest}: top level is not an object")
    deps = data.get("dependencies") or {}
    return deps if isinstance(deps, dict) else {}
