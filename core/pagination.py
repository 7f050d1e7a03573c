"""
Bounded Pagination

Drives page-numbered listing endpoints (WOO X client trades, Paradex fills)
until a short page signals exhaustion or the hard page cap is reached.

The cap bounds work against a buggy or adversarial server: with the defaults
(100 records per page, 10 pages) no more than 1000 records are aggregated
per fetch. Very active accounts are therefore undercounted; this is a
boundedness guarantee, not a completeness one.

Usage:
    async def fetch_page(page: int, page_size: int) -> list:
        return await client.get_trades(query, page=page, limit=page_size)

    records = await PaginatedFetcher(fetch_page).fetch_all()
"""

from typing import Any, Awaitable, Callable, List

from core.logging import get_logger

DEFAULT_PAGE_SIZE = 100
DEFAULT_MAX_PAGES = 10

PageFetch = Callable[[int, int], Awaitable[List[Any]]]


class PaginatedFetcher:
    """
    Sequential, capped page walker.

    Args:
        fetch_page: Coroutine function ``(page, page_size) -> records``;
                    pages are numbered from 1
        page_size: Records requested per page
        max_pages: Hard cap on the number of page requests
        label: Name used in log lines (e.g. "woox trades")

    Notes:
        - Records are concatenated in server order, never re-sorted
        - A failing page aborts the walk; the error propagates unchanged
    """

    def __init__(
        self,
        fetch_page: PageFetch,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
        label: str = "records"
    ):
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        if max_pages <= 0:
            raise ValueError(f"max_pages must be positive, got {max_pages}")

        self.fetch_page = fetch_page
        self.page_size = page_size
        self.max_pages = max_pages
        self.label = label
        self.pages_fetched = 0
        self.truncated = False
        self.logger = get_logger(__name__)

    async def fetch_all(self) -> List[Any]:
        """
        Fetch every page up to the cap and return all records.

        Returns:
            List of records in server-returned order

        Raises:
            Whatever ``fetch_page`` raises, on the first failing page
        """
        records: List[Any] = []
        self.pages_fetched = 0
        self.truncated = False

        for page in range(1, self.max_pages + 1):
            self.logger.debug(f"Fetching {self.label} page {page}")
            batch = await self.fetch_page(page, self.page_size)
            self.pages_fetched = page

            batch = list(batch or [])
            records.extend(batch)

            if len(batch) < self.page_size:
                break
        else:
            self.truncated = True
            self.logger.warning(
                f"Reached page limit ({self.max_pages}) for {self.label}; "
                f"stopping at {len(records)} records"
            )

        self.logger.info(f"Retrieved {len(records)} {self.label} in {self.pages_fetched} page(s)")
        return records
