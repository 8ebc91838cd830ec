"""
Tests for offset-based pagination with count elision.

The content and count loaders are mocks, so these tests observe exactly
which statements the strategy decides to run.
"""

from unittest.mock import AsyncMock

import pytest
from prometheus_client import REGISTRY

from member_search.exceptions import StoreError
from member_search.schemas.condition import MemberSearchCondition
from member_search.schemas.member_team import MemberTeamDto
from member_search.schemas.page import PageRequest
from member_search.storage.pagination import (
    OffsetPaginationStrategy,
    PaginationStrategy,
)
from member_search.storage.query_planner import plan_member_team_query


def make_rows(count: int, start: int = 1) -> list[MemberTeamDto]:
    """Build `count` projections with consecutive member ids."""
    return [
        MemberTeamDto(member_id=i, username=f"member{i}", age=i * 10)
        for i in range(start, start + count)
    ]


def count_decisions(outcome: str) -> float:
    """Current value of the pagination count decision counter."""
    value = REGISTRY.get_sample_value(
        "member_search_pagination_count_queries_total", {"outcome": outcome}
    )
    return value or 0.0


@pytest.fixture
def plan():
    """Provides an unfiltered plan."""
    return plan_member_team_query(MemberSearchCondition())


class TestOffsetPaginationStrategy:
    """Tests for OffsetPaginationStrategy."""

    def test_satisfies_protocol(self):
        """Test structural compatibility with PaginationStrategy."""
        strategy = OffsetPaginationStrategy(AsyncMock(), AsyncMock())

        assert isinstance(strategy, PaginationStrategy)

    @pytest.mark.asyncio
    async def test_full_page_runs_count(self, plan):
        """Test 4 matches with page size 3: page 0 needs the count."""
        fetch_content = AsyncMock(return_value=make_rows(3))
        fetch_count = AsyncMock(return_value=4)
        strategy = OffsetPaginationStrategy(fetch_content, fetch_count)
        executed_before = count_decisions("executed")

        page = await strategy.paginate(plan, PageRequest(offset=0, page_size=3))

        assert len(page.content) == 3
        assert page.total_elements == 4
        assert page.has_next is True
        fetch_count.assert_awaited_once_with(plan.count)
        assert count_decisions("executed") == executed_before + 1

    @pytest.mark.asyncio
    async def test_short_first_page_elides_count(self, plan):
        """Test 2 matches with page size 3: no count statement."""
        fetch_content = AsyncMock(return_value=make_rows(2))
        fetch_count = AsyncMock()
        strategy = OffsetPaginationStrategy(fetch_content, fetch_count)
        elided_before = count_decisions("elided")

        page = await strategy.paginate(plan, PageRequest(offset=0, page_size=3))

        assert len(page.content) == 2
        assert page.total_elements == 2
        assert page.is_last is True
        fetch_count.assert_not_awaited()
        assert count_decisions("elided") == elided_before + 1

    @pytest.mark.asyncio
    async def test_short_page_at_offset_elides_count(self, plan):
        """Test 5 matches, page size 3, offset 3: total is offset + 2."""
        fetch_content = AsyncMock(return_value=make_rows(2, start=4))
        fetch_count = AsyncMock()
        strategy = OffsetPaginationStrategy(fetch_content, fetch_count)

        page = await strategy.paginate(plan, PageRequest(offset=3, page_size=3))

        assert page.total_elements == 5
        assert page.offset == 3
        assert page.number == 1
        fetch_count.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_page_elides_count(self, plan):
        """Test that an empty page past the end reports offset as total."""
        fetch_count = AsyncMock()
        strategy = OffsetPaginationStrategy(AsyncMock(return_value=[]), fetch_count)

        page = await strategy.paginate(plan, PageRequest(offset=10, page_size=5))

        assert page.content == []
        assert page.total_elements == 10
        fetch_count.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_content_query_is_sliced(self, plan):
        """Test that offset and limit are applied to the content statement."""
        fetch_content = AsyncMock(return_value=[])
        strategy = OffsetPaginationStrategy(fetch_content, AsyncMock())

        await strategy.paginate(plan, PageRequest(offset=6, page_size=3))

        query = fetch_content.await_args.args[0]
        compiled = query.compile(compile_kwargs={"literal_binds": True})
        assert "LIMIT 3" in str(compiled)
        assert "OFFSET 6" in str(compiled)

    @pytest.mark.asyncio
    async def test_simple_mode_always_counts(self, plan):
        """Test that elide_count=False runs the count even for short pages."""
        fetch_count = AsyncMock(return_value=2)
        strategy = OffsetPaginationStrategy(
            AsyncMock(return_value=make_rows(2)), fetch_count, elide_count=False
        )

        page = await strategy.paginate(plan, PageRequest(offset=0, page_size=3))

        assert page.total_elements == 2
        fetch_count.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_simple_mode_past_last_row(self, plan):
        """Test 2 matches, page size 3, offset 3 with the count always run."""
        fetch_count = AsyncMock(return_value=2)
        strategy = OffsetPaginationStrategy(
            AsyncMock(return_value=[]), fetch_count, elide_count=False
        )

        page = await strategy.paginate(plan, PageRequest(offset=3, page_size=3))

        assert page.content == []
        assert page.total_elements == 3
        assert page.has_next is False
        fetch_count.assert_awaited_once_with(plan.count)

    @pytest.mark.asyncio
    async def test_content_failure_skips_count(self, plan):
        """Test that a failing content statement never triggers the count."""
        fetch_content = AsyncMock(side_effect=StoreError("connection refused"))
        fetch_count = AsyncMock()
        strategy = OffsetPaginationStrategy(fetch_content, fetch_count)

        with pytest.raises(StoreError, match="connection refused"):
            await strategy.paginate(plan, PageRequest(offset=0, page_size=3))

        fetch_count.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_count_failure_is_surfaced(self, plan):
        """Test that a failing count is raised, never estimated."""
        fetch_content = AsyncMock(return_value=make_rows(3))
        fetch_count = AsyncMock(side_effect=StoreError("count failed"))
        strategy = OffsetPaginationStrategy(fetch_content, fetch_count)

        with pytest.raises(StoreError, match="count failed"):
            await strategy.paginate(plan, PageRequest(offset=0, page_size=3))
