# Public API of the member search package
from member_search.exceptions import (
    MemberSearchError,
    NonUniqueResultError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from member_search.schemas.condition import MemberSearchCondition
from member_search.schemas.member_team import MemberTeamDto
from member_search.schemas.page import (
    Direction,
    NullsOrder,
    Page,
    PageRequest,
    SortKey,
)
from member_search.search import assign_team, build_predicate, search, search_page

__all__ = [
    "Direction",
    "MemberSearchCondition",
    "MemberSearchError",
    "MemberTeamDto",
    "NonUniqueResultError",
    "NotFoundError",
    "NullsOrder",
    "Page",
    "PageRequest",
    "SortKey",
    "StoreError",
    "ValidationError",
    "assign_team",
    "build_predicate",
    "search",
    "search_page",
]
