from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from apinav.config import Settings
from apinav.domain.models import ApiEndpoint, ProjectType
from apinav.domain.search import filter_endpoints
from apinav.repo.project_detector import detect_project_type
from apinav.scanners.registry import ScannerRegistry
from apinav.store.content_cache import ContentCache

logger = logging.getLogger(__name__)

RootsSource = Union[Sequence[Path], Callable[[], Sequence[Path]]]


@dataclass(frozen=True)
class RootResult:
    root: str
    project_type: ProjectType
    endpoint_count: int
    error: str | None = None


@dataclass(frozen=True)
class ScanReport:
    roots: tuple[RootResult, ...]
    endpoint_count: int
    duration_seconds: float

    @property
    def failed_roots(self) -> tuple[RootResult, ...]:
        return tuple(r for r in self.roots if r.error is not None)


class EndpointProvider:
    """
    Owns the current endpoint collection for a set of workspace roots.

    scan_workspace() rebuilds the collection from scratch and swaps it in as one
    tuple, so search_endpoints() only ever sees a complete generation. While a
    scan runs, further scan_workspace() calls return immediately without effect.
    """

    def __init__(
        self,
        registry: ScannerRegistry,
        roots: RootsSource,
        settings: Optional[Settings] = None,
        detector: Callable[[Path], ProjectType] = detect_project_type,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.registry = registry
        self.settings = settings or Settings()
        self._roots = roots
        self._detector = detector
        self._clock = clock

        self.cache = ContentCache(max_size=self.settings.cache_max_size)
        self._endpoints: tuple[ApiEndpoint, ...] = ()
        self._last_report: ScanReport | None = None
        self._last_scan_at: float | None = None
        self._in_flight = threading.Lock()

    @property
    def endpoints(self) -> tuple[ApiEndpoint, ...]:
        return self._endpoints

    @property
    def last_report(self) -> ScanReport | None:
        return self._last_report

    @property
    def is_scanning(self) -> bool:
        return self._in_flight.locked()

    def scan_workspace(self) -> ScanReport | None:
        """
        Scan every root and publish the merged result.
        Returns None when another scan is already running.
        """
        if not self._in_flight.acquire(blocking=False):
            logger.debug("Scan already in progress; request dropped")
            return None
        try:
            return self._scan()
        finally:
            self._in_flight.release()

    def _scan(self) -> ScanReport:
        started = self._clock()
        try:
            roots = [Path(r) for r in self._workspace_roots()]
        except Exception:
            logger.exception("Failed to enumerate workspace roots")
            raise

        results: list[tuple[RootResult, list[ApiEndpoint]]] = []
        if roots:
            workers = max(1, min(self.settings.max_workers, len(roots)))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(self._scan_root, root) for root in roots]
                results = [f.result() for f in futures]

        merged: list[ApiEndpoint] = []
        for _, endpoints in results:
            merged.extend(endpoints)

        report = ScanReport(
            roots=tuple(r for r, _ in results),
            endpoint_count=len(merged),
            duration_seconds=self._clock() - started,
        )
        # single rebinding: readers see the old or the new tuple, never a mix
        self._endpoints = tuple(merged)
        self._last_report = report
        self._last_scan_at = self._clock()

        logger.info("Scanned %d roots: %d endpoints", len(roots), len(merged))
        return report

    def _workspace_roots(self) -> Sequence[Path]:
        if callable(self._roots):
            return self._roots()
        return self._roots

    def _scan_root(self, root: Path) -> tuple[RootResult, list[ApiEndpoint]]:
        project_type: ProjectType = "unknown"
        try:
            project_type = self._detector(root)
            scanner = self.registry.get(project_type)
            if scanner is None:
                logger.info("No scanner for %s (project type %s)", root, project_type)
                return RootResult(str(root), project_type, 0), []

            endpoints = scanner.scan(root, read_text=self.cache.read)
            return RootResult(str(root), project_type, len(endpoints)), endpoints
        except Exception as exc:
            logger.warning("Scan of %s failed: %s", root, exc, exc_info=True)
            return RootResult(str(root), project_type, 0, error=str(exc) or type(exc).__name__), []

    def search_endpoints(self, query: str) -> list[ApiEndpoint]:
        return filter_endpoints(self._endpoints, query)

    def get_endpoints(self) -> tuple[ApiEndpoint, ...]:
        """Current collection, rescanned first if missing or older than the TTL."""
        if self._is_stale():
            self.scan_workspace()
        return self._endpoints

    def _is_stale(self) -> bool:
        if self._last_scan_at is None:
            return True
        return self._clock() - self._last_scan_at > self.settings.scan_ttl_seconds
