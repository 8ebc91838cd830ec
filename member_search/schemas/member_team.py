from typing import Any

from pydantic import BaseModel, ConfigDict


class MemberTeamDto(BaseModel):  # type: ignore[misc]
    """
    Flattened member + team row produced by the content query.

    Built straight from projected columns, so no Member/Team object graph
    is loaded. `team_id` and `team_name` are None for members without a
    team.
    """

    model_config = ConfigDict(frozen=True)

    member_id: int
    username: str | None = None
    age: int
    team_id: int | None = None
    team_name: str | None = None

    @classmethod
    def from_row(cls, row: Any) -> "MemberTeamDto":
        """
        Build a DTO from a result row whose keys match the field names.

        Args:
            row: SQLAlchemy Row (or any object with a `_mapping`).

        Returns:
            The projected DTO.
        """
        return cls.model_validate(dict(row._mapping))
