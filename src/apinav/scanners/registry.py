from __future__ import annotations

import logging
from typing import Optional

from apinav.config import Settings
from apinav.domain.models import ProjectType
from apinav.scanners.base import Scanner
from apinav.scanners.ecosystem import EcosystemSpec
from apinav.scanners.ecosystems.golang import ECHO, GIN
from apinav.scanners.ecosystems.java import SPRING_BOOT
from apinav.scanners.ecosystems.node import EXPRESS, NEST
from apinav.scanners.ecosystems.python import FASTAPI
from apinav.scanners.engine import LineScanner

logger = logging.getLogger(__name__)

ECOSYSTEMS: tuple[EcosystemSpec, ...] = (SPRING_BOOT, EXPRESS, NEST, GIN, ECHO, FASTAPI)


class ScannerRegistry:
    """Project type -> scanner lookup table. Built once, owned by the caller."""

    def __init__(self) -> None:
        self._scanners: dict[ProjectType, Scanner] = {}

    def register(self, project_type: ProjectType, scanner: Scanner) -> None:
        if project_type in self._scanners:
            logger.debug("Replacing scanner for %s", project_type)
        self._scanners[project_type] = scanner

    def get(self, project_type: ProjectType) -> Optional[Scanner]:
        return self._scanners.get(project_type)

    def supported_types(self) -> set[ProjectType]:
        return set(self._scanners)

    def __len__(self) -> int:
        return len(self._scanners)


def build_default_registry(settings: Optional[Settings] = None) -> ScannerRegistry:
    settings = settings or Settings()
    registry = ScannerRegistry()
    for spec in ECOSYSTEMS:
        registry.register(
            spec.project_type,
            LineScanner(
                spec,
                settings.scanner_config(spec.project_type),
                lookahead_lines=settings.lookahead_lines,
                max_workers=settings.max_workers,
            ),
        )
    return registry
