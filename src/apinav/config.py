"""
Runtime configuration for apinav.

Values come from `APINAV_*` environment variables (or a `.env` file) and are
validated once when `Settings()` is built. Scanner configs are keyed by project
type; `APINAV_SCANNER_CONFIGS` accepts a JSON object to override them.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from apinav.domain.models import ProjectType, ScannerConfig

KIB = 1024
MIB = 1024 * KIB


def default_scanner_configs() -> dict[ProjectType, ScannerConfig]:
    return {
        "spring_boot": ScannerConfig(
            file_extensions={"java"},
            exclude_patterns={"test", "build"},
            max_file_size_bytes=MIB,
        ),
        "express": ScannerConfig(
            file_extensions={"js", "ts"},
            exclude_patterns={"node_modules", "test"},
            max_file_size_bytes=512 * KIB,
        ),
        "nest": ScannerConfig(
            file_extensions={"ts"},
            exclude_patterns={"node_modules", "test"},
            max_file_size_bytes=512 * KIB,
        ),
        "gin": ScannerConfig(
            file_extensions={"go"},
            exclude_patterns={"vendor", "test"},
            max_file_size_bytes=512 * KIB,
        ),
        "echo": ScannerConfig(
            file_extensions={"go"},
            exclude_patterns={"vendor", "test"},
            max_file_size_bytes=512 * KIB,
        ),
        "fastapi": ScannerConfig(
            file_extensions={"py"},
            exclude_patterns={"test", "__pycache__", "venv", ".env"},
            max_file_size_bytes=512 * KIB,
        ),
    }


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="APINAV_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    scanner_configs: dict[ProjectType, ScannerConfig] = Field(
        default_factory=default_scanner_configs
    )

    # content cache capacity (files)
    cache_max_size: int = Field(default=100, ge=1)
    # get_endpoints() rescans when the last scan is older than this
    scan_ttl_seconds: float = Field(default=300.0, ge=0)

    lookahead_lines: int = Field(default=8, ge=1, le=100)
    max_workers: int = Field(default=8, ge=1, le=64)

    search_max_results: int = Field(default=100, ge=1)
    log_level: str = Field(default="WARNING")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {sorted(valid_levels)}")
        return upper

    def scanner_config(self, project_type: ProjectType) -> ScannerConfig:
        return self.scanner_configs.get(project_type) or ScannerConfig()
