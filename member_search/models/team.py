from typing import TYPE_CHECKING

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from member_search.models.member import Member


class Team(SQLModel, table=True):
    """
    SQLModel representing a team that members may belong to.

    The team owns its id and name only. `members` is the derived side of
    `Member.team_id`: it is never written directly, there is no delete
    cascade, and a member moves between teams through
    `Member.change_team()`.

    Attributes:
        id: Primary key identifier for the team
        name: Name of the team
        members: Members currently assigned to this team
    """

    __table_args__ = {"extend_existing": True}

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)

    members: list["Member"] = Relationship(back_populates="team")
