import pytest
from pydantic import ValidationError

from apinav.domain.models import ApiEndpoint, ScannerConfig


def make(path: str, **kw) -> ApiEndpoint:
    fields = dict(api_path=path, file_path="/src/app.go", line_number=3, language="go")
    fields.update(kw)
    return ApiEndpoint(**fields)


def test_endpoint_display_helpers():
    e = make("/users", class_name="UserHandler", method_name="List")
    assert e.qualified_name == "UserHandler.List"
    assert e.location == "/src/app.go:3"
    assert make("/users", method_name="list").qualified_name == "list"


@pytest.mark.parametrize("bad", ["users", "//users", "/users/", "/a//b"])
def test_endpoint_rejects_unnormalized_paths(bad):
    with pytest.raises(ValidationError):
        make(bad)


def test_endpoint_is_immutable():
    e = make("/")
    with pytest.raises(ValidationError):
        e.api_path = "/other"


def test_endpoint_line_numbers_are_one_based():
    with pytest.raises(ValidationError):
        make("/", line_number=0)


def test_scanner_config_normalizes_extensions():
    cfg = ScannerConfig(file_extensions={".JAVA", "kt", " "})
    assert cfg.file_extensions == frozenset({"java", "kt"})
    assert cfg.max_file_size_bytes is None
