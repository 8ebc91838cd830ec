"""
Search condition schema for member queries.

Every field is optional; a field left as None contributes no constraint
to the generated predicate (it is never turned into an `IS NULL` check).
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, Field


class BaseFilter(BaseModel):  # type: ignore[misc]
    """
    Base class for immutable filter schemas.

    Provides common utilities for converting filters to dictionaries
    and excluding None values.
    """

    def to_dict(self) -> dict[str, Any]:
        """
        Convert filter schema to dictionary, excluding None values.

        Returns:
            Dictionary of non-None filter values.

        Example:
            >>> condition = MemberSearchCondition(username="member1")
            >>> condition.to_dict()
            {'username': 'member1'}
        """
        return {k: v for k, v in self.model_dump().items() if v is not None}

    def is_empty(self) -> bool:
        """Return True when no criterion is set."""
        return not self.to_dict()

    model_config = {
        "extra": "forbid",  # Reject unexpected fields
        "frozen": True,
        "populate_by_name": True,
    }


class MemberSearchCondition(BaseFilter):
    """
    Optional criteria for searching members.

    All present criteria are combined with AND. No range validation is
    performed: `age_goe > age_loe` is a legal condition that matches no
    member.

    Example:
        >>> condition = MemberSearchCondition(
        ...     team_name="teamB", age_goe=30, age_loe=40
        ... )
        >>> results = await repo.search(condition)
    """

    username: str | None = Field(
        default=None,
        description="Exact member username",
    )
    team_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("team_name", "teamName"),
        description="Exact team name",
    )
    age_goe: int | None = Field(
        default=None,
        validation_alias=AliasChoices("age_goe", "ageGoe", "ageMin"),
        description="Minimum age (inclusive)",
    )
    age_loe: int | None = Field(
        default=None,
        validation_alias=AliasChoices("age_loe", "ageLoe", "ageMax"),
        description="Maximum age (inclusive)",
    )
