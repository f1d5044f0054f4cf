"""
Helpers for the response shapes the marketplace backend has used over time.

Some endpoints answer with the payload itself, others wrap it as
``{"success": true, "data": {...}}``. Callers name the keys they expect and
take the first mapping that carries one of them.
"""

from __future__ import annotations

import math
from typing import Any, Iterator, Mapping

from .types import Pagination

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def _candidates(body: Any) -> Iterator[Mapping[str, Any]]:
    if not isinstance(body, Mapping):
        return
    yield body
    data = body.get("data")
    if isinstance(data, Mapping):
        yield data


def unwrap(body: Any, *keys: str) -> Any:
    """
    Return the first mapping among ``body`` and ``body["data"]`` carrying any of ``keys``.

    Without keys, a ``{"success": ..., "data": ...}`` envelope is opened and anything
    else is returned unchanged. When keys are given and nothing matches, ``{}`` is returned.
    """
    if not keys:
        if isinstance(body, Mapping) and "data" in body and ("success" in body or len(body) == 1):
            return body.get("data")
        return body
    for candidate in _candidates(body):
        if any(k in candidate for k in keys):
            return candidate
    return {}


def pick(body: Any, *keys: str, default: Any = None) -> Any:
    """Value of the first of ``keys`` found by :func:`unwrap`, else ``default``."""
    found = unwrap(body, *keys)
    for k in keys:
        if k in found and found[k] is not None:
            return found[k]
    return default


def _as_int(v: Any, default: int) -> int:
    if isinstance(v, bool):
        return default
    if isinstance(v, int):
        return v
    if isinstance(v, float) and v.is_integer():
        return int(v)
    if isinstance(v, str):
        try:
            return int(v.strip())
        except ValueError:
            return default
    return default


def normalize_pagination(raw: Any, *, page: int | None = None, limit: int | None = None) -> Pagination:
    src: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    page_n = _as_int(src.get("page"), page or DEFAULT_PAGE)
    limit_n = _as_int(src.get("limit"), limit or DEFAULT_LIMIT)
    total = max(_as_int(src.get("total"), 0), 0)

    total_pages = _as_int(src.get("totalPages"), -1)
    if total_pages < 0:
        total_pages = math.ceil(total / limit_n) if limit_n > 0 else 0

    has_more = src.get("hasMore")
    if not isinstance(has_more, bool):
        has_more = page_n < total_pages

    return {
        "page": page_n,
        "limit": limit_n,
        "total": total,
        "totalPages": total_pages,
        "hasMore": has_more,
    }


def as_list(v: Any) -> list[Any]:
    return list(v) if isinstance(v, list) else []
