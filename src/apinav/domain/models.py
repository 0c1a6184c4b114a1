from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS", "TRACE"]

Language = Literal["java", "go", "javascript", "typescript", "python"]

ProjectType = Literal["spring_boot", "express", "nest", "gin", "echo", "fastapi", "unknown"]

HTTP_METHODS: frozenset[str] = frozenset(
    ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS", "TRACE")
)


class ApiEndpoint(BaseModel):
    """One discovered route, pointing at the handler's file and line."""

    model_config = ConfigDict(frozen=True)

    api_path: str
    class_name: str = ""
    method_name: str = "unknown"
    file_path: str
    line_number: int = Field(ge=1)
    language: Language
    http_method: Optional[HttpMethod] = None

    parameters: tuple[str, ...] = ()
    return_type: str = ""

    @field_validator("api_path")
    @classmethod
    def validate_api_path(cls, v: str) -> str:
        if not v.startswith("/") or "//" in v or (v != "/" and v.endswith("/")):
            raise ValueError(f"api_path is not normalized: {v!r}")
        return v

    @property
    def qualified_name(self) -> str:
        if self.class_name:
            return f"{self.class_name}.{self.method_name}"
        return self.method_name

    @property
    def location(self) -> str:
        return f"{self.file_path}:{self.line_number}"


class ScannerConfig(BaseModel):
    """File selection rules for one ecosystem's scanner."""

    model_config = ConfigDict(frozen=True)

    file_extensions: frozenset[str] = frozenset()
    # substrings matched against the full file path
    exclude_patterns: frozenset[str] = frozenset()
    max_file_size_bytes: Optional[int] = Field(default=None, ge=1)

    @field_validator("file_extensions")
    @classmethod
    def normalize_extensions(cls, v: frozenset[str]) -> frozenset[str]:
        return frozenset(ext.strip().lstrip(".").lower() for ext in v if ext.strip())
