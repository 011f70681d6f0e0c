"""Response shape helpers and the parallel fetch used by aggregate views."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from api import ApiError, ResponseShapeError

logger = logging.getLogger(__name__)

COMMON_ARRAY_FIELDS = ("guests", "rooms", "bookings", "items", "results", "records")


@dataclass
class Page:
    items: List[Any] = field(default_factory=list)
    page: int = 1
    pages: int = 1
    total: int = 0


def extract_array(data: Any, field_name: Optional[str] = None) -> List[Any]:
    """Return the list carried by ``data``, or an empty list.

    Accepts a bare list, ``{"data": [...]}``, ``{field_name: [...]}``, one of
    the common collection keys, or any object with a single list-valued key.
    """
    if isinstance(data, list):
        logger.debug("payload is already a list")
        return data

    if isinstance(data, dict):
        if isinstance(data.get("data"), list):
            logger.debug("found list in 'data'")
            return data["data"]

        if field_name and isinstance(data.get(field_name), list):
            logger.debug("found list in %r", field_name)
            return data[field_name]

        for key in COMMON_ARRAY_FIELDS:
            if isinstance(data.get(key), list):
                logger.debug("found list in %r", key)
                return data[key]

        if len(data) == 1:
            (key, value), = data.items()
            if isinstance(value, list):
                logger.debug("found list in single key %r", key)
                return value

    logger.debug("no list found in payload, using empty list")
    return []


def _pagination(payload: Dict[str, Any], count: int) -> Tuple[int, int]:
    info = payload.get("pagination") or {}
    total = info.get("total") or payload.get("total") or count
    pages = info.get("pages") or payload.get("pages") or 1
    try:
        return max(int(pages), 1), int(total)
    except (TypeError, ValueError):
        return 1, count


def parse_page(payload: Any, page: int = 1) -> Page:
    """Parse a ``{success, data: [...], pagination}`` envelope strictly."""
    if not isinstance(payload, dict):
        raise ResponseShapeError("Unexpected response from server", payload=payload)
    if payload.get("success") is False:
        raise ApiError(payload.get("message"), payload=payload)
    items = payload.get("data")
    if not isinstance(items, list):
        raise ResponseShapeError("Unexpected response from server", payload=payload)
    pages, total = _pagination(payload, len(items))
    return Page(items=items, page=page, pages=pages, total=total)


def parse_page_lenient(payload: Any, field_name: Optional[str] = None, page: int = 1) -> Page:
    items = extract_array(payload, field_name)
    if isinstance(payload, dict):
        pages, total = _pagination(payload, len(items))
    else:
        pages, total = 1, len(items)
    return Page(items=items, page=page, pages=pages, total=total)


def unwrap_record(payload: Any) -> Dict[str, Any]:
    """Return the single document of a get/create/update response."""
    if isinstance(payload, dict):
        if payload.get("success") is False:
            raise ApiError(payload.get("message"), payload=payload)
        if "data" in payload:
            if not isinstance(payload["data"], dict):
                raise ResponseShapeError("Unexpected response from server", payload=payload)
            return payload["data"]
        return payload
    raise ResponseShapeError("Unexpected response from server", payload=payload)


def gather(tasks: Dict[str, Callable[[], Any]]) -> Tuple[Dict[str, Any], Dict[str, ApiError]]:
    """Run independent backend calls in parallel and wait for all of them.

    Returns ``(results, errors)`` keyed by task name; a failed task appears
    only in ``errors``.
    """
    results: Dict[str, Any] = {}
    errors: Dict[str, ApiError] = {}
    if not tasks:
        return results, errors

    with ThreadPoolExecutor(max_workers=len(tasks)) as pool:
        futures = {name: pool.submit(fn) for name, fn in tasks.items()}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except ApiError as e:
                logger.warning("parallel fetch %r failed: %s", name, e)
                errors[name] = e
    return results, errors
