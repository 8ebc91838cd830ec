from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from member_search.models.team import Team


class Member(SQLModel, table=True):
    """
    SQLModel representing a member, the entity filtered by member search.

    This is a clean data model without Active Record methods.
    Use MemberRepository for all database operations.

    Attributes:
        id: Primary key identifier for the member
        username: Name of the member
        age: Age of the member
        team_id: Foreign key of the member's team, None when unassigned
        team: The member's team, None when unassigned
    """

    __table_args__ = {"extend_existing": True}

    id: int | None = Field(default=None, primary_key=True)
    username: str | None = Field(default=None, index=True)
    age: int = Field(default=0, index=True)
    team_id: int | None = Field(
        default=None, foreign_key="team.id", index=True, nullable=True
    )

    team: Optional["Team"] = Relationship(back_populates="members")

    def change_team(self, team: "Team") -> None:
        """
        Move this member to another team.

        Assigning the many-to-one side fires the `back_populates` events,
        so the member leaves the old team's `members` collection and joins
        the new one in the same step. Only `team_id` is persisted.

        Args:
            team: Team the member now belongs to.
        """
        self.team = team
