"""
Dynamic predicate composition for member search.

Each criterion of a MemberSearchCondition maps to one clause function that
returns a SQLAlchemy boolean clause, or None when the criterion is absent.
Both public composition styles are thin wrappers over the same list of
optional clauses, folded with a None-skipping AND:

    ```python
    # Declarative: build every clause, drop the absent ones, conjoin
    predicate = build_predicate(condition)

    # Accumulator: start from "always true", AND clauses in one by one
    builder = PredicateBuilder()
    builder.and_(username_eq(condition))
    builder.and_(team_name_eq(condition))
    predicate = builder.build()
    ```

An empty condition yields `true()`, i.e. an unfiltered scan.
"""

from functools import reduce
from typing import Callable, Iterable

from sqlalchemy import ColumnElement, and_, true

from member_search.models.member import Member
from member_search.models.team import Team
from member_search.schemas.condition import MemberSearchCondition

Clause = ColumnElement[bool]


def username_eq(condition: MemberSearchCondition) -> Clause | None:
    if condition.username is None:
        return None
    return Member.username == condition.username


def team_name_eq(condition: MemberSearchCondition) -> Clause | None:
    if condition.team_name is None:
        return None
    return Team.name == condition.team_name


def age_goe(condition: MemberSearchCondition) -> Clause | None:
    if condition.age_goe is None:
        return None
    return Member.age >= condition.age_goe


def age_loe(condition: MemberSearchCondition) -> Clause | None:
    if condition.age_loe is None:
        return None
    return Member.age <= condition.age_loe


# Clause functions in the order they are applied
CLAUSE_FUNCTIONS: tuple[
    Callable[[MemberSearchCondition], Clause | None], ...
] = (username_eq, team_name_eq, age_goe, age_loe)

# Clause functions whose clause references Team columns
TEAM_CLAUSE_FUNCTIONS = frozenset({team_name_eq})


def condition_clauses(condition: MemberSearchCondition) -> list[Clause | None]:
    """
    Evaluate every clause function against the condition.

    Args:
        condition: Search criteria.

    Returns:
        One entry per clause function, None for absent criteria.
    """
    return [clause_fn(condition) for clause_fn in CLAUSE_FUNCTIONS]


def and_all(clauses: Iterable[Clause | None]) -> Clause:
    """
    Conjoin clauses, skipping None.

    Args:
        clauses: Optional clauses.

    Returns:
        The conjunction, or `true()` when no clause is present.
    """
    return reduce(_and_skipping_none, clauses, true())


def _and_skipping_none(acc: Clause, clause: Clause | None) -> Clause:
    if clause is None:
        return acc
    return and_(acc, clause)


class PredicateBuilder:
    """
    Mutable predicate accumulator.

    `and_()` ignores None so callers can pass clause function results
    straight through without checking them.

    Example:
        ```python
        builder = PredicateBuilder()
        if condition.username is not None:
            builder.and_(Member.username == condition.username)
        builder.and_(age_goe(condition))  # None-safe
        query = query.where(builder.build())
        ```
    """

    def __init__(self) -> None:
        self._clauses: list[Clause | None] = []

    def and_(self, clause: Clause | None) -> "PredicateBuilder":
        self._clauses.append(clause)
        return self

    def has_value(self) -> bool:
        """Return True when at least one non-None clause was added."""
        return any(clause is not None for clause in self._clauses)

    def build(self) -> Clause:
        return and_all(self._clauses)


def build_predicate(condition: MemberSearchCondition) -> Clause:
    """
    Build the combined predicate declaratively.

    Args:
        condition: Search criteria.

    Returns:
        AND of all present criteria, `true()` if none is present.
    """
    return and_all(condition_clauses(condition))


def build_predicate_sequential(condition: MemberSearchCondition) -> Clause:
    """
    Build the combined predicate with a PredicateBuilder.

    Produces the same expression as build_predicate() for every condition.

    Args:
        condition: Search criteria.

    Returns:
        AND of all present criteria, `true()` if none is present.
    """
    builder = PredicateBuilder()
    for clause in condition_clauses(condition):
        builder.and_(clause)
    return builder.build()


def references_team(condition: MemberSearchCondition) -> bool:
    """
    Check whether any present criterion filters on Team columns.

    Args:
        condition: Search criteria.

    Returns:
        True if the predicate needs the team table joined.
    """
    return any(
        clause_fn(condition) is not None for clause_fn in TEAM_CLAUSE_FUNCTIONS
    )
