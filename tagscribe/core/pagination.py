"""Concurrent retrieval of every page of a Link-header paginated collection."""

from __future__ import annotations

import asyncio
import itertools
import logging
import re
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import TypeVar

import httpx

from tagscribe.core.errors import PaginationProtocolError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# A single-page fetch: page number (1-based) -> (items, response headers).
PageFetcher = Callable[[int], Awaitable[tuple[Sequence[T], Mapping[str, str]]]]

_LINK_ENTRY_RE = re.compile(r'<(?P<url>[^>]*)>\s*;\s*rel="(?P<rel>[^"]*)"')


def _header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive header lookup that also works on plain dicts."""
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def last_page_number(link_header: str) -> int:
    """Return the ``page`` query parameter of the ``rel="last"`` entry.

    ``link_header`` looks like ``<url1>; rel="next", <url2>; rel="last"``.
    Raises PaginationProtocolError when the entry or its page number is missing.
    """
    for entry in link_header.split(","):
        match = _LINK_ENTRY_RE.search(entry)
        if match is None or match["rel"] != "last":
            continue
        page = httpx.URL(match["url"].strip()).params.get("page")
        if page is None or not page.isdigit() or int(page) < 1:
            raise PaginationProtocolError(f"Invalid last page number in Link header: {link_header!r}")
        return int(page)
    raise PaginationProtocolError(f"Could not find last page number in Link header: {link_header!r}")


async def fetch_all_pages(fetch_page: PageFetcher[T], max_concurrency: int | None = None) -> list[T]:
    """Fetch page 1, then pages ``2..last`` concurrently, and concatenate in page order.

    Results are collected in page order, so the result never
    depends on completion order. The first failing page cancels its siblings
    and its exception propagates unchanged.
    """
    first_items, headers = await fetch_page(1)
    link_header = _header(headers, "Link")
    if link_header is None:
        return list(first_items)

    last_page = last_page_number(link_header)
    logger.debug("Link header reports %d page(s)", last_page)

    sem = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def _fetch_items(page: int) -> Sequence[T]:
        if sem is None:
            items, _ = await fetch_page(page)
        else:
            async with sem:
                items, _ = await fetch_page(page)
        return items

    tasks = [asyncio.create_task(_fetch_items(page)) for page in range(2, last_page + 1)]
    try:
        # gather returns results in task order, i.e. page order.
        rest = await asyncio.gather(*tasks)
    except BaseException:
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    return list(itertools.chain(first_items, *rest))
