from __future__ import annotations


def combine_paths(*segments: str | None) -> str:
    """
    Join route fragments into one normalized path.

      combine_paths("/", "users")          -> "/users"
      combine_paths("", "/users/", "/42/") -> "/users/42"

    Segments that are empty or exactly "/" are dropped; the rest lose their
    leading/trailing slashes. Runs of slashes inside a segment are collapsed so
    the result never contains "//".
    """
    parts: list[str] = []
    for seg in segments:
        if not seg or seg == "/":
            continue
        parts.extend(p for p in seg.strip("/").split("/") if p)
    return "/" + "/".join(parts)
