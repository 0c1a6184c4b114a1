from pathlib import Path
import textwrap

from apinav.domain.models import ScannerConfig
from apinav.repo.scanner import read_text_file
from apinav.scanners.ecosystems.golang import GIN
from apinav.scanners.engine import LineScanner

GIN_SRC = """
package main

import "github.com/gin-gonic/gin"

func main() {
	r := gin.Default()
	r.GET("{path}", handler)
}
"""


def write(p: Path, s: str) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(textwrap.dedent(s), encoding="utf-8")


def gin_file(p: Path, route: str) -> None:
    write(p, GIN_SRC.replace("{path}", route))


class RecordingScanner(LineScanner):
    def __init__(self, config: ScannerConfig, fail_on: str = "") -> None:
        super().__init__(GIN, config, max_workers=4)
        self.parsed: list[str] = []
        self.fail_on = fail_on

    def parse_file(self, content: str, file_path: str):
        self.parsed.append(file_path)
        if self.fail_on and self.fail_on in file_path:
            raise RuntimeError("boom")
        return super().parse_file(content, file_path)


def test_excluded_files_are_never_read(tmp_path: Path):
    root = tmp_path / "ws"
    gin_file(root / "cmd" / "main.go", "/ok")
    gin_file(root / "vendor" / "lib" / "lib.go", "/vendored")
    gin_file(root / "cmd" / "generated_routes.go", "/generated")

    reads: list[str] = []

    def reader(path: str) -> str:
        reads.append(path)
        return read_text_file(path)

    scanner = LineScanner(GIN, ScannerConfig(file_extensions={"go"}, exclude_patterns={"vendor", "generated"}))
    eps = scanner.scan(root, read_text=reader)

    assert [e.api_path for e in eps] == ["/ok"]
    assert len(reads) == 1
    assert not any("vendor" in p or "generated" in p for p in reads)


def test_oversized_files_are_never_parsed(tmp_path: Path):
    root = tmp_path / "ws"
    gin_file(root / "big.go", "/big" + "x" * 400)
    gin_file(root / "small.go", "/small")

    small_size = (root / "small.go").stat().st_size
    scanner = RecordingScanner(ScannerConfig(file_extensions={"go"}, max_file_size_bytes=small_size))
    eps = scanner.scan(root)

    assert [e.api_path for e in eps] == ["/small"]
    assert [Path(p).name for p in scanner.parsed] == ["small.go"]


def test_validate_size(tmp_path: Path):
    f = tmp_path / "a.go"
    f.write_text("héllo", encoding="utf-8")  # 6 bytes in UTF-8

    unlimited = LineScanner(GIN, ScannerConfig())
    assert unlimited.validate_size(str(f))

    assert LineScanner(GIN, ScannerConfig(max_file_size_bytes=6)).validate_size(str(f))
    assert not LineScanner(GIN, ScannerConfig(max_file_size_bytes=5)).validate_size(str(f))


def test_size_ceiling_counts_undecodable_bytes(tmp_path: Path):
    root = tmp_path / "ws"
    padded = root / "padded.go"
    gin_file(padded, "/ping")
    with open(padded, "ab") as fh:
        fh.write(b"\xff" * 4000)
    assert padded.stat().st_size > 4000
    # decoding drops every \xff, so the text alone looks small
    assert len(read_text_file(str(padded)).encode("utf-8")) < 1024

    reads: list[str] = []

    def reader(path: str) -> str:
        reads.append(path)
        return read_text_file(path)

    scanner = RecordingScanner(ScannerConfig(file_extensions={"go"}, max_file_size_bytes=1024))
    assert not scanner.validate_size(str(padded))
    assert scanner.scan(root, read_text=reader) == []
    assert scanner.parsed == []
    assert reads == []


def test_failing_file_does_not_affect_siblings(tmp_path: Path):
    root = tmp_path / "ws"
    gin_file(root / "a.go", "/a")
    gin_file(root / "bad.go", "/bad")
    gin_file(root / "c.go", "/c")
    gin_file(root / "gone.go", "/gone")

    def reader(path: str) -> str:
        if path.endswith("gone.go"):
            raise FileNotFoundError(path)
        return read_text_file(path)

    scanner = RecordingScanner(ScannerConfig(file_extensions={"go"}), fail_on="bad.go")
    eps = scanner.scan(root, read_text=reader)

    assert sorted(e.api_path for e in eps) == ["/a", "/c"]
    assert any(p.endswith("bad.go") for p in scanner.parsed)
    assert not any(p.endswith("gone.go") for p in scanner.parsed)


def test_results_follow_file_order(tmp_path: Path):
    root = tmp_path / "ws"
    for name in ["b", "a", "d", "c"]:
        gin_file(root / f"{name}.go", f"/{name}")

    scanner = LineScanner(GIN, ScannerConfig(file_extensions={"go"}), max_workers=4)
    files = scanner.list_candidate_files(root)
    assert [Path(f).name for f in files] == ["a.go", "b.go", "c.go", "d.go"]
    assert [e.api_path for e in scanner.scan_files(files)] == ["/a", "/b", "/c", "/d"]


def test_gate_failure_skips_parse(tmp_path: Path):
    root = tmp_path / "ws"
    write(root / "plain.go", "package main\n\nfunc main() {}\n")

    scanner = RecordingScanner(ScannerConfig(file_extensions={"go"}))
    assert scanner.scan(root) == []
    assert scanner.parsed == []
