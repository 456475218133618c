"""
Cursor pagination over list endpoints.

List endpoints answer with {"data": [...], "nextPageCursor": str | null}.
A null or missing cursor means the list is exhausted.
"""

from typing import Any, Awaitable, Callable

from loguru import logger

from wrapblox.services.request import RequestDescriptor

PageCursor = str | None
Executor = Callable[[RequestDescriptor], Awaitable[Any]]
ItemExtractor = Callable[[Any], list[Any]]

CURSOR_PARAM = "cursor"
LIMIT_PARAM = "limit"


def extract_data(page: Any) -> list[Any]:
    """Default extractor: the envelope's data array."""
    if isinstance(page, dict):
        return list(page.get("data") or [])
    return []


def next_cursor(page: Any) -> PageCursor:
    if isinstance(page, dict):
        return page.get("nextPageCursor") or None
    return None


async def fetch_list(
    execute: Executor,
    descriptor: RequestDescriptor,
    max_results: int,
    extractor: ItemExtractor = extract_data,
    page_size: int | None = None,
) -> list[Any]:
    """
    Collect up to max_results items by following page cursors.

    Args:
        execute: Runs one request through the full request path
        descriptor: Request for the first page; the cursor is injected per page
        max_results: Upper bound on returned items
        extractor: Pulls the item list out of one page
        page_size: Sent as the limit parameter unless the descriptor has one

    Returns:
        Items in upstream order, never more than max_results
    """
    if max_results <= 0:
        return []

    if page_size and descriptor.get_param(LIMIT_PARAM) is None:
        descriptor = descriptor.with_param(LIMIT_PARAM, page_size)

    items: list[Any] = []
    cursor: PageCursor = None
    seen: set[str] = set()
    pages = 0

    while True:
        page = await execute(descriptor.with_param(CURSOR_PARAM, cursor))
        pages += 1

        batch = extractor(page)
        remaining = max_results - len(items)
        items.extend(batch[:remaining])

        if len(items) >= max_results:
            break

        cursor = next_cursor(page)
        if cursor is None:
            break
        if cursor in seen:
            logger.warning(
                f"Cursor repeated on {descriptor.service}{descriptor.path}, stopping"
            )
            break
        seen.add(cursor)

    logger.debug(
        f"Fetched {len(items)} items from {descriptor.service}{descriptor.path} "
        f"in {pages} pages"
    )
    return items
