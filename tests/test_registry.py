from apinav.config import Settings
from apinav.domain.models import ScannerConfig
from apinav.scanners.ecosystems.golang import GIN
from apinav.scanners.engine import LineScanner
from apinav.scanners.registry import ScannerRegistry, build_default_registry


def test_default_registry_covers_every_ecosystem():
    registry = build_default_registry(Settings())
    assert registry.supported_types() == {"spring_boot", "express", "nest", "gin", "echo", "fastapi"}
    assert registry.get("unknown") is None

    for project_type in registry.supported_types():
        scanner = registry.get(project_type)
        assert scanner.project_type == project_type


def test_default_registry_uses_settings():
    settings = Settings(lookahead_lines=3, max_workers=2, scanner_configs={"gin": ScannerConfig(file_extensions={"go"})})
    registry = build_default_registry(settings)

    gin = registry.get("gin")
    assert gin.lookahead_lines == 3
    assert gin.max_workers == 2
    assert gin.config.file_extensions == frozenset({"go"})
    assert registry.get("express").config == ScannerConfig()


def test_register_overwrites():
    registry = ScannerRegistry()
    first = LineScanner(GIN, ScannerConfig())
    second = LineScanner(GIN, ScannerConfig(file_extensions={"go"}))

    registry.register("gin", first)
    registry.register("gin", first)
    assert len(registry) == 1

    registry.register("gin", second)
    assert registry.get("gin") is second
    assert registry.supported_types() == {"gin"}


def test_registries_are_independent():
    a = ScannerRegistry()
    b = ScannerRegistry()
    a.register("gin", LineScanner(GIN, ScannerConfig()))
    assert b.get("gin") is None
