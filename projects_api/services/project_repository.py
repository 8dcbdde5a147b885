"""Project Repository — the five CRUD operations against the TestProjects table.

Invariants:
    - One statement per operation, identifier-quoted and parameter-bound
    - On PostgreSQL, search_path is set to public before every statement: the
      least-privilege deployment role has a restricted default search_path
    - Missing table is a soft state: list -> [], get/update/delete -> not found,
      create -> SchemaNotReadyError
    - Every other database error propagates unchanged to the error Guard

Design Decisions:
    - Repository returns rows / booleans and routes map them to HTTP: keeps the
      "not found" decision in one place per endpoint
    - Missing-table checks catch DBAPIError only and re-raise anything else
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy import delete, select, text, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from projects_api.core.errors import SchemaNotReadyError
from projects_api.infrastructure.database import is_missing_table_error
from projects_api.models.test_project import TABLE_NAME, TestProject

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SET_SEARCH_PATH = text('SET search_path = public, "$user"')


class ProjectRepository:
    """Data access for TestProject rows over one scoped session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_all(self) -> list[TestProject]:
        async def _list() -> list[TestProject]:
            result = await self.db.execute(
                select(TestProject).order_by(TestProject.id),
            )
            return list(result.scalars().all())

        return await self._tolerate_missing_table(_list, [])

    async def get(self, project_id: int) -> TestProject | None:
        async def _get() -> TestProject | None:
            result = await self.db.execute(
                select(TestProject).where(TestProject.id == project_id),
            )
            return result.scalar_one_or_none()

        return await self._tolerate_missing_table(_get, None)

    async def create(self, name: str) -> TestProject:
        """Insert a row. Raises SchemaNotReadyError when the table is missing."""
        try:
            await self._set_search_path()
            project = TestProject(name=name)
            self.db.add(project)
            await self.db.commit()
            return project
        except DBAPIError as e:
            if not is_missing_table_error(e):
                raise
            await self.db.rollback()
            logger.info(f"{TABLE_NAME} table missing on create")
            raise SchemaNotReadyError(TABLE_NAME) from e

    async def update(self, project_id: int, name: str) -> bool:
        """Rename a row. False when no row (or no table) matched."""
        async def _update() -> bool:
            result = await self.db.execute(
                update(TestProject)
                .where(TestProject.id == project_id)
                .values(name=name)
                .execution_options(synchronize_session=False),
            )
            await self.db.commit()
            return result.rowcount > 0

        return await self._tolerate_missing_table(_update, False)

    async def delete(self, project_id: int) -> bool:
        """Delete a row. False when no row (or no table) matched."""
        async def _delete() -> bool:
            result = await self.db.execute(
                delete(TestProject)
                .where(TestProject.id == project_id)
                .execution_options(synchronize_session=False),
            )
            await self.db.commit()
            return result.rowcount > 0

        return await self._tolerate_missing_table(_delete, False)

    async def _set_search_path(self) -> None:
        if self.db.get_bind().dialect.name == "postgresql":
            await self.db.execute(_SET_SEARCH_PATH)

    async def _tolerate_missing_table(
        self, operation: Callable[[], Awaitable[T]], fallback: T,
    ) -> T:
        try:
            await self._set_search_path()
            return await operation()
        except DBAPIError as e:
            if not is_missing_table_error(e):
                raise
            await self.db.rollback()
            logger.info(f"{TABLE_NAME} table missing, treating as empty")
            return fallback
