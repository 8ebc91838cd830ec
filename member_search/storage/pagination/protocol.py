"""
Protocol definition for pagination strategies.

Uses Python's structural subtyping (Protocol) to define the interface for
pagination strategies without requiring explicit inheritance. This follows
the same pattern as member_search.protocols.RecordStore.
"""

from typing import Protocol, TypeVar, runtime_checkable

from member_search.schemas.page import Page, PageRequest
from member_search.storage.query_planner import QueryPlan

T = TypeVar("T", covariant=True)


@runtime_checkable
class PaginationStrategy(Protocol[T]):
    """
    Protocol for pagination strategies.

    Any class implementing paginate() is considered compatible.

    Type Parameters:
        T: Type of the items on a page.

    Example:
        ```python
        class AlwaysCountStrategy:
            async def paginate(
                self, plan: QueryPlan, page_request: PageRequest
            ) -> Page[MemberTeamDto]:
                ...


        strategy: PaginationStrategy[MemberTeamDto] = AlwaysCountStrategy()
        ```
    """

    async def paginate(
        self,
        plan: QueryPlan,
        page_request: PageRequest,
    ) -> Page[T]:
        """
        Execute the plan for one page.

        Args:
            plan: Content and count statements. The strategy applies the
                request's offset and page size to the content statement.
            page_request: Requested slice.

        Returns:
            The page with content and total element count.

        Raises:
            StoreError: If a statement fails.
        """
        ...
