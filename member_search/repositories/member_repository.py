"""
Repository for Member entity with dynamic search and pagination.

This repository extends BaseRepository with the two statement executors
the pagination engine needs and with the search operations built on the
predicate builder and query planner.

Example:
    ```python
    from member_search.repositories.member_repository import MemberRepository
    from member_search.storage.db import read_session

    async with read_session() as session:
        repo = MemberRepository(session)
        rows = await repo.search(MemberSearchCondition(team_name="teamB"))
        page = await repo.search_page(
            MemberSearchCondition(age_goe=20), PageRequest.of(0, 10)
        )
    ```
"""

from typing import Any, Callable

from sqlalchemy import Select
from sqlalchemy.exc import MultipleResultsFound, SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from member_search.exceptions import StoreError, ValidationError
from member_search.logging import logger
from member_search.models.member import Member
from member_search.models.team import Team
from member_search.repositories.base import BaseRepository
from member_search.schemas.condition import MemberSearchCondition
from member_search.schemas.member_team import MemberTeamDto
from member_search.schemas.page import Page, PageRequest
from member_search.storage.pagination.offset import OffsetPaginationStrategy
from member_search.storage.predicates import build_predicate_sequential
from member_search.storage.query_planner import (
    TEAM_SORT_FIELDS,
    QueryPlan,
    apply_sort,
    joins_team,
    plan_member_query,
    plan_member_team_query,
)


class MemberRepository(BaseRepository[Member]):
    """
    Repository for Member entity operations.

    Provides CRUD operations inherited from BaseRepository plus the
    record store executors and member search.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize Member repository.

        Args:
            session: Database session for executing queries.
        """
        super().__init__(session, Member)

    async def execute_content_query(self, query: Select) -> list[MemberTeamDto]:
        """
        Execute a projected content statement.

        Args:
            query: Statement selecting the MemberTeamDto columns.

        Returns:
            One DTO per row, in statement order.

        Raises:
            StoreError: If database query fails.
        """
        try:
            result = await self.session.exec(query)
            return [MemberTeamDto.from_row(row) for row in result.all()]
        except SQLAlchemyError as e:
            raise self._store_error("searching", e) from e

    async def execute_count_query(self, query: Select) -> int:
        """
        Execute a count statement.

        Works for SQLModel and plain SQLAlchemy selects alike; the statement
        must return exactly one row with the count in its first column.

        Args:
            query: Statement selecting a single count column.

        Returns:
            The count.

        Raises:
            StoreError: If database query fails or the statement returned
                more than one row.
        """
        try:
            result = await self.session.execute(query)
            return int(result.scalar_one())
        except MultipleResultsFound as e:
            message = (
                "Count statement returned several rows; "
                "select an aggregate such as func.count(Member.id)"
            )
            logger.error(message)
            raise StoreError(message) from e
        except SQLAlchemyError as e:
            raise self._store_error("counting", e) from e

    async def execute_entity_query(self, query: Select) -> list[Member]:
        """
        Execute a statement selecting Member entities.

        Raises:
            StoreError: If database query fails.
        """
        try:
            result = await self.session.exec(query)
            return list(result.all())
        except SQLAlchemyError as e:
            raise self._store_error("searching", e) from e

    async def find_by_username(self, username: str) -> list[Member]:
        """
        Get members by exact username.

        Usernames are not unique, so this returns every match.

        Args:
            username: Exact username to search for.

        Returns:
            Members with that username, in primary key order.
        """
        return await self.get_all(username=username)

    async def search(self, condition: MemberSearchCondition) -> list[MemberTeamDto]:
        """
        Search members with a declaratively composed predicate.

        Args:
            condition: Optional criteria; absent ones are ignored.

        Returns:
            Every matching member with its team, in store order. Members
            without a team are included with team fields set to None.
        """
        plan = plan_member_team_query(condition)
        return await self.execute_content_query(plan.content)

    async def search_by_builder(
        self, condition: MemberSearchCondition
    ) -> list[MemberTeamDto]:
        """
        Search members with an accumulator-built predicate.

        Returns exactly what search() returns for the same condition.

        Args:
            condition: Optional criteria; absent ones are ignored.

        Returns:
            Every matching member with its team, in store order.
        """
        plan = plan_member_team_query(
            condition, build=build_predicate_sequential
        )
        return await self.execute_content_query(plan.content)

    async def search_members(self, condition: MemberSearchCondition) -> list[Member]:
        """
        Search members and return full entities instead of projections.

        Entities are expired when a read_session() ends, so read their
        attributes inside the session.

        Args:
            condition: Optional criteria; absent ones are ignored.

        Returns:
            Matching Member entities, in store order.
        """
        plan = plan_member_query(condition)
        return await self.execute_entity_query(plan.content)

    async def search_page(
        self,
        condition: MemberSearchCondition,
        page_request: PageRequest,
    ) -> Page[MemberTeamDto]:
        """
        Search one page of members, eliding the count query when possible.

        Args:
            condition: Optional criteria; absent ones are ignored.
            page_request: Offset, page size and sort keys.

        Returns:
            Page of MemberTeamDto. The count statement only runs when the
            page came back full.

        Raises:
            StoreError: If the content or (required) count query fails.
        """
        strategy = OffsetPaginationStrategy(
            self.execute_content_query, self.execute_count_query
        )
        return await strategy.paginate(
            plan_member_team_query(condition, page_request), page_request
        )

    async def search_page_simple(
        self,
        condition: MemberSearchCondition,
        page_request: PageRequest,
    ) -> Page[MemberTeamDto]:
        """
        Search one page of members, always running the count query.

        Args:
            condition: Optional criteria; absent ones are ignored.
            page_request: Offset, page size and sort keys.

        Returns:
            Page of MemberTeamDto with a freshly counted total.

        Raises:
            StoreError: If the content or count query fails.
        """
        strategy = OffsetPaginationStrategy(
            self.execute_content_query,
            self.execute_count_query,
            elide_count=False,
        )
        return await strategy.paginate(
            plan_member_team_query(condition, page_request), page_request
        )

    async def apply_pagination(
        self,
        page_request: PageRequest,
        content_query: Select,
        count_query: Select,
        row_mapper: Callable[[Any], Any] | None = None,
    ) -> Page[Any]:
        """
        Paginate caller-supplied content and count statements.

        The request's sort keys, offset and page size are applied to
        `content_query`; `count_query` runs unchanged and only when the
        page came back full. The caller is responsible for both statements
        filtering the same rows. Sorting by `team_id` or `team_name`
        requires `content_query` to already join `team`.

        Args:
            page_request: Offset, page size and sort keys.
            content_query: Unpaginated statement selecting from member.
            count_query: Statement returning one row with the count, e.g.
                `select(func.count(Member.id))`.
            row_mapper: Converts each result row; rows are returned as-is
                when None (entities for `select(Member)`).

        Returns:
            Page of mapped rows.

        Raises:
            ValidationError: If a team sort key is requested for a content
                query without `team`.
            StoreError: If the content or (required) count query fails.
        """
        team_fields = [
            sort_key.field
            for sort_key in page_request.sort
            if sort_key.field in TEAM_SORT_FIELDS
        ]
        if team_fields and not joins_team(content_query):
            message = (
                f"Sorting by {', '.join(team_fields)} needs a content query "
                f"joined with team"
            )
            logger.warning(message)
            raise ValidationError(message)

        async def fetch_content(query: Select) -> list[Any]:
            try:
                result = await self.session.exec(query)
                rows = list(result.all())
            except SQLAlchemyError as e:
                raise self._store_error("searching", e) from e
            return [row_mapper(row) for row in rows] if row_mapper else rows

        strategy = OffsetPaginationStrategy(fetch_content, self.execute_count_query)
        plan = QueryPlan(
            content=apply_sort(content_query, page_request.sort),
            count=count_query,
        )
        return await strategy.paginate(plan, page_request)

    async def assign_team(self, member: Member, team: Team) -> Member:
        """
        Move a member to a team and persist the change.

        Both sides stay consistent: the member leaves its old team's
        `members` and joins the new team's.

        Args:
            member: Member to move.
            team: Target team.

        Returns:
            The updated member.

        Raises:
            StoreError: If database operation fails.
        """
        member.change_team(team)
        return await self.update(member)

