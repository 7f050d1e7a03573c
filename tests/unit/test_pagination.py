"""
Unit Tests for PaginatedFetcher

Run with:
    pytest tests/unit/test_pagination.py -v
"""

import pytest

from core.exceptions import TransportError
from core.pagination import PaginatedFetcher


def page_source(sizes):
    """Page callable serving pages of the given sizes, recording requests."""
    requested = []

    async def fetch_page(page, page_size):
        requested.append(page)
        if page > len(sizes):
            return []
        return [(page, i) for i in range(sizes[page - 1])]

    return fetch_page, requested


class TestPaginatedFetcher:
    """Tests for bounded pagination"""

    @pytest.mark.asyncio
    async def test_stops_on_short_page(self):
        fetch_page, requested = page_source([100, 100, 37])

        fetcher = PaginatedFetcher(fetch_page, page_size=100)
        records = await fetcher.fetch_all()

        assert requested == [1, 2, 3]
        assert len(records) == 237
        assert fetcher.pages_fetched == 3
        assert fetcher.truncated is False

    @pytest.mark.asyncio
    async def test_preserves_server_order(self):
        fetch_page, _ = page_source([2, 1])

        records = await PaginatedFetcher(fetch_page, page_size=2).fetch_all()

        assert records == [(1, 0), (1, 1), (2, 0)]

    @pytest.mark.asyncio
    async def test_never_exceeds_page_cap(self):
        requested = []

        async def endless(page, page_size):
            requested.append(page)
            return [page] * page_size

        fetcher = PaginatedFetcher(endless, page_size=100, max_pages=10)
        records = await fetcher.fetch_all()

        assert len(requested) == 10
        assert len(records) == 1000
        assert fetcher.truncated is True

    @pytest.mark.asyncio
    async def test_empty_first_page(self):
        fetch_page, requested = page_source([0])

        records = await PaginatedFetcher(fetch_page).fetch_all()

        assert records == []
        assert requested == [1]

    @pytest.mark.asyncio
    async def test_exactly_full_last_page_requests_one_more(self):
        fetch_page, requested = page_source([100])

        records = await PaginatedFetcher(fetch_page, page_size=100).fetch_all()

        assert requested == [1, 2]
        assert len(records) == 100

    @pytest.mark.asyncio
    async def test_page_failure_aborts_without_partial_result(self):
        async def flaky(page, page_size):
            if page == 2:
                raise TransportError("HTTP 500 on /trades", status=500)
            return [page] * page_size

        with pytest.raises(TransportError):
            await PaginatedFetcher(flaky, page_size=10).fetch_all()

    def test_rejects_non_positive_bounds(self):
        async def noop(page, page_size):
            return []

        with pytest.raises(ValueError):
            PaginatedFetcher(noop, page_size=0)
        with pytest.raises(ValueError):
            PaginatedFetcher(noop, max_pages=0)
