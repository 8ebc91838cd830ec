"""
Tests for query planning.

These tests inspect the compiled content and count statements: join
shape, predicate, ordering and slicing.
"""

import dataclasses

import pytest
from sqlalchemy.dialects import postgresql
from sqlmodel import select

from member_search.models.member import Member
from member_search.schemas.condition import MemberSearchCondition
from member_search.schemas.page import NullsOrder, PageRequest, SortKey
from member_search.storage.predicates import build_predicate_sequential
from member_search.storage.query_planner import (
    QueryPlan,
    apply_sort,
    count_members,
    joins_team,
    member_team_columns,
    order_by_clause,
    plan_member_query,
    plan_member_team_query,
)


def render(statement) -> str:
    """Compile a statement to SQL text with inlined parameters."""
    return " ".join(
        str(
            statement.compile(
                dialect=postgresql.dialect(),
                compile_kwargs={"literal_binds": True},
            )
        ).split()
    )


class TestMemberTeamQuery:
    """Tests for the projected content statement."""

    def test_content_is_left_joined(self):
        """Test that members without a team are kept by the join."""
        sql = render(plan_member_team_query(MemberSearchCondition()).content)

        assert "FROM member LEFT OUTER JOIN team ON member.team_id = team.id" in sql

    def test_content_selects_projection_columns(self):
        """Test that the content statement selects the DTO fields."""
        sql = render(member_team_columns())

        assert "member.id AS member_id" in sql
        assert "member.username" in sql
        assert "member.age" in sql
        assert "team.id AS team_id" in sql
        assert "team.name AS team_name" in sql

    def test_content_without_page_request_is_unsliced(self):
        """Test that an unpaginated plan has no LIMIT or OFFSET."""
        sql = render(plan_member_team_query(MemberSearchCondition()).content)

        assert "LIMIT" not in sql
        assert "OFFSET" not in sql
        assert sql.endswith("ORDER BY member.id ASC")

    def test_content_applies_page_request(self):
        """Test offset, limit and sort keys on the content statement."""
        plan = plan_member_team_query(
            MemberSearchCondition(team_name="teamB"),
            PageRequest(offset=6, page_size=3, sort=(SortKey.desc("age"),)),
        )
        sql = render(plan.content)

        assert "WHERE team.name = 'teamB'" in sql
        assert "ORDER BY member.age DESC, member.id ASC" in sql
        assert "LIMIT 3" in sql
        assert "OFFSET 6" in sql

    def test_plan_is_immutable(self):
        """Test that a plan cannot be modified after creation."""
        plan = plan_member_team_query(MemberSearchCondition())

        assert isinstance(plan, QueryPlan)
        with pytest.raises(dataclasses.FrozenInstanceError):
            plan.content = plan.count  # type: ignore[misc]

    def test_builder_style_produces_same_statements(self):
        """Test that the accumulator style plans identical SQL."""
        condition = MemberSearchCondition(team_name="teamB", age_goe=30)
        declarative = plan_member_team_query(condition)
        sequential = plan_member_team_query(
            condition, build=build_predicate_sequential
        )

        assert render(declarative.content) == render(sequential.content)
        assert render(declarative.count) == render(sequential.count)


class TestCountQuery:
    """Tests for the count statement."""

    def test_count_without_team_criterion_skips_join(self):
        """Test that the team table is not joined when not filtered on."""
        sql = render(count_members(MemberSearchCondition(age_goe=20)))

        assert sql == (
            "SELECT count(member.id) AS count_1 FROM member "
            "WHERE member.age >= 20"
        )

    def test_count_with_team_criterion_joins_team(self):
        """Test that the team table is joined when filtered on."""
        sql = render(count_members(MemberSearchCondition(team_name="teamA")))

        assert "LEFT OUTER JOIN team ON member.team_id = team.id" in sql
        assert "WHERE team.name = 'teamA'" in sql

    def test_count_has_no_order_or_slice(self):
        """Test that paging never leaks into the count statement."""
        plan = plan_member_team_query(
            MemberSearchCondition(),
            PageRequest(offset=3, page_size=3, sort=(SortKey.asc("username"),)),
        )
        sql = render(plan.count)

        assert "ORDER BY" not in sql
        assert "LIMIT" not in sql
        assert "OFFSET" not in sql

    def test_count_uses_same_predicate_as_content(self):
        """Test that content and count share the WHERE clause."""
        plan = plan_member_team_query(
            MemberSearchCondition(username="member1", age_loe=30)
        )
        where = "WHERE member.username = 'member1' AND member.age <= 30"

        assert where in render(plan.content)
        assert where in render(plan.count)


class TestSorting:
    """Tests for ORDER BY construction."""

    def test_order_by_nulls_last(self):
        """Test explicit null placement."""
        term = order_by_clause(SortKey.asc("username", nulls=NullsOrder.LAST))

        assert render(term) == "member.username ASC NULLS LAST"

    def test_order_by_nulls_first_desc(self):
        """Test descending order with nulls first."""
        term = order_by_clause(SortKey.desc("team_name", nulls="first"))

        assert render(term) == "team.name DESC NULLS FIRST"

    def test_tiebreaker_is_appended(self):
        """Test that member.id is added after caller keys."""
        query = apply_sort(member_team_columns(), (SortKey.asc("age"),))

        assert render(query).endswith("ORDER BY member.age ASC, member.id ASC")

    def test_no_tiebreaker_when_member_id_is_sorted(self):
        """Test that an explicit member_id key is not duplicated."""
        query = apply_sort(member_team_columns(), (SortKey.desc("member_id"),))

        assert render(query).endswith("ORDER BY member.id DESC")

    def test_joins_team_on_projection(self):
        """Test that the projected statement is recognised as joining team."""
        assert joins_team(member_team_columns()) is True

    def test_joins_team_on_member_only_query(self):
        """Test that a member-only statement does not select from team."""
        assert joins_team(select(Member).where(Member.age >= 20)) is False


class TestMemberEntityQuery:
    """Tests for the entity variant of the plan."""

    def test_selects_member_entity(self):
        """Test that the entity plan selects member columns only."""
        sql = render(plan_member_query(MemberSearchCondition(team_name="teamA")).content)

        assert sql.startswith("SELECT member.id, member.username, member.age, member.team_id")
        assert "LEFT OUTER JOIN team ON member.team_id = team.id" in sql
        assert "WHERE team.name = 'teamA'" in sql
