"""
Record store client: the only place that talks to the database.

Each call opens its own session, so callers may fan out with
``asyncio.gather`` without sharing a connection between coroutines.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic_core import to_jsonable_python
from sqlalchemy import Boolean, String, func, literal_column
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import Executable, FunctionElement

from services.errors import StoreError

logger = logging.getLogger(__name__)


def _sql_string(value: str):
    return literal_column(f"'{value}'", String)


class text_search(FunctionElement):
    """Full-text match of ``term`` against ``column``.

    Compiles to a tsvector/tsquery match on PostgreSQL and to a
    case-insensitive substring match everywhere else.
    """
    type = Boolean()
    inherit_cache = True
    name = "text_search"


@compiles(text_search)
def _compile_text_search(element, compiler, **kw):
    column, term = list(element.clauses)
    # LIKE wildcards in the term match literally; "/" is the escape character.
    escaped = func.replace(
        func.replace(
            func.replace(func.lower(term), _sql_string("/"), _sql_string("//")),
            _sql_string("%"), _sql_string("/%"),
        ),
        _sql_string("_"), _sql_string("/_"),
    )
    pattern = _sql_string("%") + escaped + _sql_string("%")
    return compiler.process(func.lower(column).like(pattern, escape="/"), **kw)


@compiles(text_search, "postgresql")
def _compile_text_search_pg(element, compiler, **kw):
    column, term = list(element.clauses)
    return "to_tsvector(%s) @@ plainto_tsquery(%s)" % (
        compiler.process(column, **kw),
        compiler.process(term, **kw),
    )


def page_bounds(page: int, limit: int) -> Tuple[int, int]:
    """Offset and row count for a 1-indexed page."""
    return (page - 1) * limit, limit


def _rows(result) -> List[Dict[str, Any]]:
    return to_jsonable_python([dict(row) for row in result.mappings().all()])


class RecordStore:
    """Runs statements against the database and returns JSON-ready rows."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def fetch_all(self, stmt: Executable) -> List[Dict[str, Any]]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return _rows(result)
        except SQLAlchemyError as e:
            logger.error(f"Query failed: {e}")
            raise StoreError(str(e)) from e

    async def fetch_one(self, stmt: Executable) -> Optional[Dict[str, Any]]:
        rows = await self.fetch_all(stmt)
        return rows[0] if rows else None

    async def execute(self, stmt: Executable) -> List[Dict[str, Any]]:
        """Run a write in its own transaction.

        Returns the ``RETURNING`` rows when the statement has any.
        """
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    return _rows(result) if result.returns_rows else []
        except SQLAlchemyError as e:
            logger.error(f"Write failed: {e}")
            raise StoreError(str(e)) from e
