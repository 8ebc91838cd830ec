"""
Repository for Team entity.

Teams are looked up by name when members are assigned to them; team
membership itself is owned by Member.team_id (see MemberRepository).
"""

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from member_search.models.team import Team
from member_search.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """
    Repository for Team entity operations.

    Provides CRUD operations inherited from BaseRepository plus lookup
    by name.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize Team repository.

        Args:
            session: Database session for executing queries.
        """
        super().__init__(session, Team)

    async def get_by_name(self, name: str) -> Team | None:
        """
        Get team by exact name.

        Args:
            name: Exact team name.

        Returns:
            Team if found, None otherwise.

        Raises:
            NonUniqueResultError: If several teams share the name.
        """
        return await self.find_single(select(Team).where(Team.name == name))
