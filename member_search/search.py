"""
Caller-facing entry points for member search.

Each search opens its own read_session(), so the content and count
statements of one page share a snapshot and no transaction outlives the
call. assign_team() writes through write_session() and commits.

Example:
    ```python
    from member_search.search import assign_team, search, search_page
    from member_search.schemas.condition import MemberSearchCondition
    from member_search.schemas.page import SortKey

    rows = await search(MemberSearchCondition(team_name="teamB"))
    await assign_team(member_id=1, team_name="teamB")

    page = await search_page(
        MemberSearchCondition(age_goe=20),
        offset=0,
        page_size=10,
        sort_keys=[SortKey.desc("age")],
    )
    print(page.total_elements, page.has_next)
    ```
"""

from typing import Sequence

from member_search.commands.member_commands import (
    AssignTeamCommand,
    AssignTeamInput,
    SearchMemberPageCommand,
    SearchMemberPageInput,
    SearchMembersCommand,
)
from member_search.models.member import Member
from member_search.repositories.member_repository import MemberRepository
from member_search.repositories.team_repository import TeamRepository
from member_search.schemas.condition import MemberSearchCondition
from member_search.schemas.member_team import MemberTeamDto
from member_search.schemas.page import Page, SortKey
from member_search.storage.db import read_session, write_session
from member_search.storage.predicates import build_predicate

__all__ = ["assign_team", "build_predicate", "search", "search_page"]


async def search(condition: MemberSearchCondition) -> list[MemberTeamDto]:
    """
    Return every member matching the condition, joined with its team.

    Args:
        condition: Optional criteria; absent ones are ignored.

    Returns:
        Matching rows in store order. Members without a team are included
        with team fields set to None.

    Raises:
        StoreError: If the statement fails.
    """
    async with read_session() as session:
        command = SearchMembersCommand(MemberRepository(session))
        return await command.execute(condition)


async def search_page(
    condition: MemberSearchCondition,
    offset: int = 0,
    page_size: int | None = None,
    sort_keys: Sequence[SortKey] = (),
) -> Page[MemberTeamDto]:
    """
    Return one page of matching members.

    The count statement is only sent when the page comes back full.

    Args:
        condition: Optional criteria; absent ones are ignored.
        offset: Number of matching rows to skip.
        page_size: Rows per page, DEFAULT_PAGE_SIZE when None.
        sort_keys: Sort keys in priority order.

    Returns:
        The page, with an exact total_elements.

    Raises:
        ValidationError: If offset, page size or a sort key is invalid.
        StoreError: If a statement fails.
    """
    async with read_session() as session:
        command = SearchMemberPageCommand(MemberRepository(session))
        return await command.execute(
            SearchMemberPageInput(
                condition=condition,
                offset=offset,
                page_size=page_size,
                sort=list(sort_keys),
            )
        )


async def assign_team(member_id: int, team_name: str) -> Member:
    """
    Move a member to the team with the given name and commit.

    Args:
        member_id: Member to move.
        team_name: Name of an existing team.

    Returns:
        The updated member. Column attributes stay readable after the
        call; the `team` relationship is not loaded.

    Raises:
        NotFoundError: If the member or the team does not exist.
        StoreError: If a statement or the commit fails.
    """
    async with write_session() as session:
        command = AssignTeamCommand(MemberRepository(session), TeamRepository(session))
        return await command.execute(
            AssignTeamInput(member_id=member_id, team_name=team_name)
        )
