"""
Generic SQLModel repository.

Repositories are the only place that talks to the session. Every
SQLAlchemy failure leaves a repository as StoreError (NonUniqueResultError
for ambiguous single fetches) with the driver error chained, after being
logged and counted once here.

Example:
    ```python
    class TeamRepository(BaseRepository[Team]):
        def __init__(self, session: AsyncSession):
            super().__init__(session, Team)

        async def get_by_name(self, name: str) -> Team | None:
            return await self.find_single(select(Team).where(Team.name == name))
    ```
"""

from typing import Any, Generic, Type, TypeVar

from sqlalchemy import Select
from sqlalchemy.exc import MultipleResultsFound, SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from member_search.exceptions import NonUniqueResultError, StoreError
from member_search.logging import logger
from member_search.utils.metrics import db_query_errors_total

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Lookups and persistence for one SQLModel table.

    Type Parameters:
        T: The SQLModel table class.

    Attributes:
        session: Session every statement runs on.
        model: The managed table class.
    """

    def __init__(self, session: AsyncSession, model: Type[T]):
        self.session = session
        self.model = model

    def _store_error(self, operation: str, ex: SQLAlchemyError) -> StoreError:
        """Log and count a failed statement, then wrap it for the caller."""
        message = f"Error {operation} {self.model.__name__}: {ex}"
        logger.error(message)
        db_query_errors_total.labels(
            operation=operation, error_type=type(ex).__name__
        ).inc()
        return StoreError(message)

    def _filtered(self, **filters: Any) -> Select:
        """Select the model with an equality clause per non-None filter."""
        stmt = select(self.model)
        for field_name, value in filters.items():
            if value is not None:
                stmt = stmt.where(getattr(self.model, field_name) == value)
        return stmt

    async def _persist(self, entity: T, operation: str) -> T:
        try:
            self.session.add(entity)
            await self.session.flush()
            await self.session.refresh(entity)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise self._store_error(operation, e) from e
        return entity

    async def get_by_id(self, id: int) -> T | None:
        """
        Look up a row by primary key.

        Returns:
            The entity, or None when there is no such row.

        Raises:
            StoreError: If the lookup fails.
        """
        try:
            return await self.session.get(self.model, id)
        except SQLAlchemyError as e:
            raise self._store_error("retrieving", e) from e

    async def get_all(self, **filters: Any) -> list[T]:
        """
        List rows whose columns equal the given values.

        None values are ignored, so `get_all(username=None)` lists every
        row.

        Args:
            **filters: Column name to value, e.g. `username="member1"`.

        Returns:
            Matching entities ordered by primary key.

        Raises:
            StoreError: If the query fails.
        """
        stmt = self._filtered(**filters).order_by(self.model.id)  # type: ignore[attr-defined]
        try:
            result = await self.session.exec(stmt)
            return list(result.all())
        except SQLAlchemyError as e:
            raise self._store_error("retrieving", e) from e

    async def find_single(self, query: Select) -> T | None:
        """
        Run a statement expected to match at most one row.

        Args:
            query: Statement selecting this repository's model.

        Returns:
            The entity, or None if nothing matched.

        Raises:
            NonUniqueResultError: If more than one row matched.
            StoreError: If the query fails.
        """
        try:
            result = await self.session.exec(query)
            return result.one_or_none()
        except MultipleResultsFound as e:
            message = f"Expected at most one {self.model.__name__}, got several"
            logger.error(message)
            raise NonUniqueResultError(message) from e
        except SQLAlchemyError as e:
            raise self._store_error("retrieving", e) from e

    async def create(self, entity: T) -> T:
        """
        Insert a new row and load its generated columns.

        Raises:
            StoreError: If the insert fails; the session is rolled back.
        """
        return await self._persist(entity, "creating")

    async def update(self, entity: T) -> T:
        """
        Flush changes made to an entity and reload it.

        Raises:
            StoreError: If the update fails; the session is rolled back.
        """
        return await self._persist(entity, "updating")

    async def delete(self, entity: T) -> None:
        """
        Delete a row.

        Raises:
            StoreError: If the delete fails; the session is rolled back.
        """
        try:
            await self.session.delete(entity)
            await self.session.flush()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise self._store_error("deleting", e) from e

    async def exists(self, **filters: Any) -> bool:
        """
        Check whether any row has the given column values.

        Raises:
            StoreError: If the query fails.
        """
        try:
            result = await self.session.exec(self._filtered(**filters).limit(1))
            return result.first() is not None
        except SQLAlchemyError as e:
            raise self._store_error("checking existence of", e) from e
