"""
Structural interfaces for the record store.

The search core is written against these protocols rather than against
MemberRepository, so any object with matching coroutines (a repository,
a test double, a read replica wrapper) can serve it.

Example:
    ```python
    async def total_matches(store: RecordStore, plan: QueryPlan) -> int:
        return await store.execute_count_query(plan.count)
    ```
"""

from typing import Any, Protocol, TypeVar, runtime_checkable

from sqlalchemy import Select

from member_search.schemas.member_team import MemberTeamDto

T = TypeVar("T")


@runtime_checkable
class Repository(Protocol[T]):
    """
    Simple lookups and persistence for one entity type.

    Not used by the search itself; available for basic lookups and
    fixtures.
    """

    async def get_by_id(self, id: int) -> T | None: ...

    async def get_all(self, **filters: Any) -> list[T]: ...

    async def create(self, entity: T) -> T: ...

    async def update(self, entity: T) -> T: ...

    async def delete(self, entity: T) -> None: ...

    async def exists(self, **filters: Any) -> bool: ...

    async def find_single(self, query: Select) -> T | None:
        """
        Return the only matching entity, or None when nothing matches.

        Raises:
            NonUniqueResultError: If more than one row matched.
        """
        ...


@runtime_checkable
class RecordStore(Repository[T], Protocol[T]):
    """
    Store the pagination engine runs its two statements against.

    Both executors must be bound to the same session for the content and
    count of one page to observe the same snapshot.
    """

    async def execute_content_query(self, query: Select) -> list[MemberTeamDto]:
        """
        Run a projected content statement.

        Returns:
            One MemberTeamDto per row, in statement order.

        Raises:
            StoreError: If the statement fails.
        """
        ...

    async def execute_count_query(self, query: Select) -> int:
        """
        Run a single-column count statement.

        Raises:
            StoreError: If the statement fails.
        """
        ...
