"""
Commands for member search operations.

Commands encapsulate the search flow and depend only on repositories.
They are used by the module-level facade in member_search.search and can
be driven directly with any session:

Example:
    ```python
    from member_search.commands.member_commands import (
        SearchMemberPageCommand,
        SearchMemberPageInput,
    )

    async with read_session() as session:
        command = SearchMemberPageCommand(MemberRepository(session))
        page = await command.execute(
            SearchMemberPageInput(
                condition=MemberSearchCondition(team_name="teamB"),
                offset=0,
                page_size=20,
            )
        )
    ```
"""

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from member_search.commands.base import BaseCommand
from member_search.constants import MAX_PAGE_SIZE
from member_search.exceptions import NotFoundError, ValidationError
from member_search.logging import logger
from member_search.models.member import Member
from member_search.repositories.member_repository import MemberRepository
from member_search.repositories.team_repository import TeamRepository
from member_search.schemas.condition import MemberSearchCondition
from member_search.schemas.member_team import MemberTeamDto
from member_search.schemas.page import Page, PageRequest, SortKey
from member_search.settings import app_settings

# ============================================================================
# Input Models
# ============================================================================


class SearchMemberPageInput(BaseModel):  # type: ignore[misc]
    """Input model for searching one page of members."""

    condition: MemberSearchCondition = Field(
        default_factory=MemberSearchCondition,
        description="Optional search criteria",
    )
    offset: int = Field(default=0, description="Number of rows to skip")
    page_size: int | None = Field(
        default=None,
        description="Rows per page, defaults to DEFAULT_PAGE_SIZE",
    )
    sort: list[SortKey] = Field(
        default_factory=list, description="Sort keys in priority order"
    )


class AssignTeamInput(BaseModel):  # type: ignore[misc]
    """Input model for moving a member to a team."""

    member_id: int = Field(..., description="Member to move")
    team_name: str = Field(..., min_length=1, description="Target team name")


def build_page_request(
    offset: int, page_size: int | None, sort: list[SortKey] | tuple[SortKey, ...]
) -> PageRequest:
    """
    Build a PageRequest, applying the default and maximum page size.

    Args:
        offset: Number of rows to skip.
        page_size: Requested page size, None for DEFAULT_PAGE_SIZE.
            Capped at MAX_PAGE_SIZE.
        sort: Sort keys in priority order.

    Returns:
        Validated page request.

    Raises:
        ValidationError: If offset is negative or page size is below 1.
    """
    if page_size is None:
        page_size = app_settings.DEFAULT_PAGE_SIZE
    page_size = min(page_size, MAX_PAGE_SIZE)

    try:
        return PageRequest(offset=offset, page_size=page_size, sort=tuple(sort))
    except PydanticValidationError as ex:
        logger.warning(f"Rejected page request: {ex}")
        raise ValidationError(f"Invalid page request: {ex}") from ex


# ============================================================================
# Commands
# ============================================================================


class SearchMembersCommand(BaseCommand[MemberSearchCondition, list[MemberTeamDto]]):
    """
    Command to search members without pagination.

    Members without a team are included with team fields set to None.
    """

    def __init__(self, repository: MemberRepository):
        """
        Initialize command with repository.

        Args:
            repository: Member repository for data access.
        """
        self.repository = repository

    async def execute(self, input_data: MemberSearchCondition) -> list[MemberTeamDto]:
        """
        Execute command to search members.

        Args:
            input_data: Search criteria.

        Returns:
            Every matching member, in store order.
        """
        return await self.repository.search(input_data)


class SearchMemberPageCommand(
    BaseCommand[SearchMemberPageInput, Page[MemberTeamDto]]
):
    """
    Command to search one page of members.

    The count query is skipped when the page comes back short.
    """

    def __init__(self, repository: MemberRepository):
        """
        Initialize command with repository.

        Args:
            repository: Member repository for data access.
        """
        self.repository = repository

    async def execute(self, input_data: SearchMemberPageInput) -> Page[MemberTeamDto]:
        """
        Execute command to search one page.

        Args:
            input_data: Criteria, offset, page size and sort keys.

        Returns:
            Page of matching members.

        Raises:
            ValidationError: If the page request is invalid. Raised before
                any statement runs.
            StoreError: If a statement fails.
        """
        page_request = build_page_request(
            input_data.offset, input_data.page_size, input_data.sort
        )
        return await self.repository.search_page(input_data.condition, page_request)


class AssignTeamCommand(BaseCommand[AssignTeamInput, Member]):
    """
    Command to move a member to a team.

    Validates that both the member and the team exist.
    """

    def __init__(
        self, member_repository: MemberRepository, team_repository: TeamRepository
    ):
        """
        Initialize command with repositories.

        Args:
            member_repository: Member repository for data access.
            team_repository: Team repository for data access.
        """
        self.member_repository = member_repository
        self.team_repository = team_repository

    async def execute(self, input_data: AssignTeamInput) -> Member:
        """
        Execute command to assign a member to a team.

        Args:
            input_data: Member ID and target team name.

        Returns:
            Updated member.

        Raises:
            NotFoundError: If the member or the team does not exist.
        """
        member = await self.member_repository.get_by_id(input_data.member_id)
        if not member:
            raise NotFoundError(f"Member with ID {input_data.member_id} not found")

        team = await self.team_repository.get_by_name(input_data.team_name)
        if not team:
            raise NotFoundError(f"Team '{input_data.team_name}' not found")

        return await self.member_repository.assign_team(member, team)
