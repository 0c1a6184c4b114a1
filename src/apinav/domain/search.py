from __future__ import annotations

from typing import Iterable

from apinav.domain.models import ApiEndpoint


def matches_query(endpoint: ApiEndpoint, query: str) -> bool:
    q = query.lower()
    return (
        q in endpoint.api_path.lower()
        or q in endpoint.class_name.lower()
        or q in endpoint.method_name.lower()
    )


def filter_endpoints(endpoints: Iterable[ApiEndpoint], query: str) -> list[ApiEndpoint]:
    """
    Case-insensitive substring search over path, class and handler name.
    Input order is preserved; there is no ranking.
    """
    return [e for e in endpoints if matches_query(e, query)]
