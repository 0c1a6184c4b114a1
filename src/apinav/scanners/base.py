"""Scanner protocol and the shared file-handling half of every scanner.

A scanner turns one workspace root into a flat list of ApiEndpoint records.
BaseScanner owns everything that is not ecosystem specific: which files are
candidates, the size ceiling, reading, the per-file failure policy and the
parallel fan-out over files. Subclasses supply the three abstract operations.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional, Protocol

from apinav.domain.models import ApiEndpoint, ScannerConfig
from apinav.repo.scanner import list_source_files, read_text_file

logger = logging.getLogger(__name__)

TextReader = Callable[[str], str]


class Scanner(Protocol):
    """Anything the registry can hand to the provider."""

    def scan(self, root: Path, read_text: Optional[TextReader] = None) -> list[ApiEndpoint]:
        """Scan every candidate file under root."""
        ...

    def is_valid_file(self, content: str) -> bool:
        """Cheap gate: False means parse_file would find nothing."""
        ...

    def parse_file(self, content: str, file_path: str) -> list[ApiEndpoint]:
        """Full single-pass parse of one file's text."""
        ...


class BaseScanner(ABC):
    def __init__(self, config: ScannerConfig, max_workers: int = 8):
        self.config = config
        self.max_workers = max_workers

    @abstractmethod
    def scan(self, root: Path, read_text: Optional[TextReader] = None) -> list[ApiEndpoint]:
        ...

    @abstractmethod
    def is_valid_file(self, content: str) -> bool:
        ...

    @abstractmethod
    def parse_file(self, content: str, file_path: str) -> list[ApiEndpoint]:
        ...

    def list_candidate_files(self, root: Path) -> list[str]:
        return list_source_files(
            Path(root),
            extensions=self.config.file_extensions,
            exclude_patterns=self.config.exclude_patterns,
        )

    def validate_size(self, file_path: str) -> bool:
        """
        True when no ceiling is configured or the file's size on disk fits under it.
        Measured on raw bytes, before any decoding. Raises OSError.
        """
        limit = self.config.max_file_size_bytes
        if not limit:
            return True
        return os.stat(file_path).st_size <= limit

    def process_file(self, file_path: str, read_text: TextReader = read_text_file) -> list[ApiEndpoint]:
        """Size-check, read, gate and parse one file. Never raises."""
        try:
            if not self.validate_size(file_path):
                logger.debug("Skipping %s: larger than %s bytes", file_path, self.config.max_file_size_bytes)
                return []
            content = read_text(file_path)
        except OSError as exc:
            logger.warning("Skipping unreadable file %s: %s", file_path, exc)
            return []

        if not self.is_valid_file(content):
            return []

        try:
            return self.parse_file(content, file_path)
        except Exception as exc:
            logger.warning("Failed to parse %s: %s", file_path, exc, exc_info=True)
            return []

    def scan_files(self, files: list[str], read_text: Optional[TextReader] = None) -> list[ApiEndpoint]:
        """
        Process every file as an independent task and join on all of them.
        Results are concatenated in `files` order.
        """
        if not files:
            return []
        reader = read_text or read_text_file

        endpoints: list[ApiEndpoint] = []
        workers = max(1, min(self.max_workers, len(files)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self.process_file, f, reader) for f in files]
            for future in futures:
                endpoints.extend(future.result())
        return endpoints
