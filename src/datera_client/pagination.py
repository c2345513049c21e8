"""Assemble complete list results across pages."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from .models import ApiListOuter, ListParams

logger = logging.getLogger(__name__)

PageFetcher = Callable[[dict[str, str]], ApiListOuter]


def collect_pages(fetch: PageFetcher, params: Mapping[str, str] | None = None) -> ApiListOuter:
    """Fetch every page of a list endpoint and return one combined envelope.

    Pagination only happens when the caller did not pin a page with `limit` or
    `offset` and the first page reports a `total_count` above what it holds.
    Other query parameters are passed through untouched on every page. A
    failing page propagates its exception and the pages gathered so far are
    dropped.
    """

    query = dict(params or {})
    first = fetch(dict(query))
    if ListParams.from_map(query).is_windowed or not first.metadata:
        return first
    total = first.total_count
    if total is None:
        return first

    items = list(first.data)
    while len(items) < total:
        query["offset"] = str(len(items))
        page = fetch(dict(query))
        if not page.data:
            logger.warning(
                "List page at offset %s came back empty with %s of %s items collected",
                query["offset"],
                len(items),
                total,
            )
            break
        items.extend(page.data)
    first.data = items
    return first
