"""
Offset-based pagination with count elision.

The content statement always runs first. The count statement only runs
when the content came back full, because a short page is provably the
last one and its total is simply `offset + len(content)`.
"""

from typing import Awaitable, Callable, Generic, TypeVar

from sqlalchemy import Select

from member_search.logging import logger
from member_search.schemas.page import Page, PageRequest
from member_search.storage.query_planner import QueryPlan
from member_search.utils.metrics import pagination_count_queries_total

T = TypeVar("T")

ContentLoader = Callable[[Select], Awaitable[list[T]]]
CountLoader = Callable[[Select], Awaitable[int]]


class OffsetPaginationStrategy(Generic[T]):
    """
    Offset/limit pagination that skips the count query when it can.

    Decision per request:
    1. Run the content statement with `limit=page_size`, `offset=offset`.
    2. Fewer than page_size rows: last page, no count statement,
       `total_elements = offset + len(content)`.
    3. Exactly page_size rows (or any page when elide_count is False): run
       the count statement; the total is never less than
       `offset + len(content)`.

    A failing content statement propagates before the count statement is
    considered; a failing count statement propagates as well, it is never
    replaced by an estimate. Both loaders should use the same session so
    they read one snapshot (see storage.db.read_session).

    Example:
        ```python
        async with read_session() as session:
            repo = MemberRepository(session)
            strategy = OffsetPaginationStrategy(
                repo.execute_content_query, repo.execute_count_query
            )
            plan = plan_member_team_query(condition, page_request)
            page = await strategy.paginate(plan, page_request)
        ```
    """

    def __init__(
        self,
        fetch_content: ContentLoader[T],
        fetch_count: CountLoader,
        elide_count: bool = True,
    ):
        """
        Initialize offset pagination strategy.

        Args:
            fetch_content: Executes a content statement and returns items.
            fetch_count: Executes a count statement and returns the count.
            elide_count: If False, always run the count statement (the
                simple mode, useful when callers want a fresh total even
                for short pages).
        """
        self.fetch_content = fetch_content
        self.fetch_count = fetch_count
        self.elide_count = elide_count

    async def paginate(
        self,
        plan: QueryPlan,
        page_request: PageRequest,
    ) -> Page[T]:
        """
        Execute one page of the plan.

        Args:
            plan: Content and count statements.
            page_request: Requested offset and page size.

        Returns:
            Page with content and total element count.

        Raises:
            StoreError: If the content or (required) count statement fails.
        """
        content_query = plan.content.offset(page_request.offset).limit(
            page_request.page_size
        )
        content = await self.fetch_content(content_query)

        if self.elide_count and len(content) < page_request.page_size:
            total = page_request.offset + len(content)
            pagination_count_queries_total.labels(outcome="elided").inc()
            logger.debug(
                f"Short page ({len(content)}/{page_request.page_size} at offset "
                f"{page_request.offset}), count query elided, total={total}"
            )
        else:
            counted = await self.fetch_count(plan.count)
            # Pages past the last row still cover offset + len(content)
            total = max(counted, page_request.offset + len(content))
            pagination_count_queries_total.labels(outcome="executed").inc()
            logger.debug(f"Count query executed, total={total}")

        return Page(
            content=content,
            total_elements=total,
            page_size=page_request.page_size,
            offset=page_request.offset,
        )
