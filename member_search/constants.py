"""
Application-level constants for hardcoded search behavior.

These values define safety limits and the public vocabulary of the search
API. They should NEVER be changed via environment variables.

For configurable values (connection pools, default page size, logging),
see member_search/settings.py.
"""

# ============================================================================
# Pagination Safety Limits
# ============================================================================

# Maximum allowed page size to prevent excessive database loads
# Hard safety limit regardless of what the caller requests
# For default page size, see member_search/settings.py (DEFAULT_PAGE_SIZE)
MAX_PAGE_SIZE = 1000


# ============================================================================
# Sorting
# ============================================================================

# Projection fields a caller may sort the content query by
SORTABLE_FIELDS = frozenset(
    {"member_id", "username", "age", "team_id", "team_name"}
)


# ============================================================================
# Logging
# ============================================================================

# Statements longer than this are truncated in slow query log lines
LOG_STATEMENT_PREVIEW_CHARS = 500
