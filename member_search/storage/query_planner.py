"""
Query planning for member search.

Turns a MemberSearchCondition (plus an optional PageRequest) into a pair
of independent statements:

- content: projected MemberTeamDto columns, `member LEFT OUTER JOIN team`,
  the combined predicate, ORDER BY and OFFSET/LIMIT
- count: `count(member.id)` under the same predicate, joining `team` only
  when the predicate references it

The join shape of the count statement is a performance choice; the set of
members it counts is always the set the content statement filters.
"""

from dataclasses import dataclass
from typing import Callable

from sqlalchemy import ColumnElement, Select, UnaryExpression
from sqlalchemy.sql.util import find_tables
from sqlmodel import func, select

from member_search.models.member import Member
from member_search.models.team import Team
from member_search.schemas.condition import MemberSearchCondition
from member_search.schemas.page import Direction, NullsOrder, PageRequest, SortKey
from member_search.storage.predicates import (
    Clause,
    build_predicate,
    references_team,
)

# Projection field name -> column it sorts on
SORT_COLUMNS: dict[str, ColumnElement] = {
    "member_id": Member.id,  # type: ignore[dict-item]
    "username": Member.username,  # type: ignore[dict-item]
    "age": Member.age,  # type: ignore[dict-item]
    "team_id": Team.id,  # type: ignore[dict-item]
    "team_name": Team.name,  # type: ignore[dict-item]
}

_TEAM_JOIN = Member.team_id == Team.id

# Sort fields whose column lives on team
TEAM_SORT_FIELDS = frozenset({"team_id", "team_name"})

PredicateFactory = Callable[[MemberSearchCondition], Clause]


@dataclass(frozen=True)
class QueryPlan:
    """
    Content and count statements for one search request.

    Attributes:
        content: Statement returning the rows of the page.
        count: Statement returning the number of matching members.
    """

    content: Select
    count: Select


def member_team_columns() -> Select:
    """Base projection: member LEFT OUTER JOIN team, no filter."""
    return select(  # type: ignore[call-overload]
        Member.id.label("member_id"),  # type: ignore[union-attr]
        Member.username,
        Member.age,
        Team.id.label("team_id"),  # type: ignore[union-attr]
        Team.name.label("team_name"),
    ).select_from(Member).outerjoin(Team, _TEAM_JOIN)


def count_members(
    condition: MemberSearchCondition,
    build: PredicateFactory = build_predicate,
) -> Select:
    """
    Build the count statement for a condition.

    Args:
        condition: Search criteria.
        build: Predicate composition style.

    Returns:
        `SELECT count(member.id)` with the team join only when needed.
    """
    query = select(func.count(Member.id)).select_from(Member)
    if references_team(condition):
        query = query.outerjoin(Team, _TEAM_JOIN)
    return query.where(build(condition))


def order_by_clause(sort_key: SortKey) -> UnaryExpression:
    """
    Convert one SortKey into an ORDER BY term.

    Args:
        sort_key: Field, direction and null placement.

    Returns:
        Column with asc()/desc() and, if requested, nulls_first()/nulls_last().
    """
    column = SORT_COLUMNS[sort_key.field]
    term = column.desc() if sort_key.direction is Direction.DESC else column.asc()

    if sort_key.nulls is NullsOrder.FIRST:
        term = term.nulls_first()
    elif sort_key.nulls is NullsOrder.LAST:
        term = term.nulls_last()
    return term


def joins_team(query: Select) -> bool:
    """True when `team` is one of the tables the statement selects from."""
    return any(
        Team.__table__ in find_tables(from_clause)  # type: ignore[attr-defined]
        for from_clause in query.get_final_froms()
    )


def apply_sort(query: Select, sort: tuple[SortKey, ...]) -> Select:
    """
    Apply sort keys in priority order.

    `member.id` ascending is appended as the final tie-breaker (or used
    alone when no key is given) so pages never overlap.

    Args:
        query: Statement selecting from member.
        sort: Sort keys, highest priority first.

    Returns:
        The ordered statement.
    """
    terms = [order_by_clause(sort_key) for sort_key in sort]
    if not any(sort_key.field == "member_id" for sort_key in sort):
        terms.append(Member.id.asc())  # type: ignore[union-attr]
    return query.order_by(*terms)


def plan_member_team_query(
    condition: MemberSearchCondition,
    page_request: PageRequest | None = None,
    *,
    build: PredicateFactory = build_predicate,
) -> QueryPlan:
    """
    Plan the projected content statement and its count statement.

    Args:
        condition: Search criteria.
        page_request: Slice and ordering; None selects every matching row
            in store order.
        build: Predicate composition style, build_predicate() or
            build_predicate_sequential(); both yield the same rows.

    Returns:
        Immutable content/count statement pair.

    Example:
        ```python
        plan = plan_member_team_query(
            MemberSearchCondition(team_name="teamB"),
            PageRequest.of(0, 20, SortKey.desc("age")),
        )
        rows = await repo.execute_content_query(plan.content)
        ```
    """
    content = member_team_columns().where(build(condition))
    content = apply_sort(content, page_request.sort if page_request else ())
    if page_request is not None:
        content = content.offset(page_request.offset).limit(page_request.page_size)

    return QueryPlan(content=content, count=count_members(condition, build))


def plan_member_query(
    condition: MemberSearchCondition,
    page_request: PageRequest | None = None,
    *,
    build: PredicateFactory = build_predicate,
) -> QueryPlan:
    """
    Plan an entity statement returning full Member rows.

    Same join, predicate and ordering as plan_member_team_query(); only
    the selected shape differs.

    Args:
        condition: Search criteria.
        page_request: Slice and ordering; None selects every matching row.
        build: Predicate composition style.

    Returns:
        Immutable content/count statement pair.
    """
    content = (
        select(Member)
        .outerjoin(Team, _TEAM_JOIN)
        .where(build(condition))
    )
    content = apply_sort(content, page_request.sort if page_request else ())
    if page_request is not None:
        content = content.offset(page_request.offset).limit(page_request.page_size)

    return QueryPlan(content=content, count=count_members(condition, build))
