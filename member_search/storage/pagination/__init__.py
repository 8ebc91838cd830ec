"""
Pagination strategies for member search.

Example:
    Using the repository (most callers):
    ```python
    page = await repo.search_page(condition, PageRequest.of(0, 20))
    ```

    Using the strategy directly:
    ```python
    from member_search.storage.pagination import OffsetPaginationStrategy

    strategy = OffsetPaginationStrategy(
        repo.execute_content_query, repo.execute_count_query
    )
    page = await strategy.paginate(plan, page_request)
    ```
"""

from member_search.storage.pagination.offset import OffsetPaginationStrategy
from member_search.storage.pagination.protocol import PaginationStrategy

__all__ = [
    "PaginationStrategy",
    "OffsetPaginationStrategy",
]
