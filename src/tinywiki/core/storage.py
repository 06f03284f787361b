"""Relational storage for wiki pages."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, TypeVar

from sqlalchemy import Column, Integer, String, Text, delete, insert, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.orm import declarative_base

from tinywiki.core.errors import (
    ConnectionFailure,
    ConstraintViolation,
    NotFound,
    SchemaInitFailure,
    Timeout,
)
from tinywiki.core.models import Page

logger = logging.getLogger(__name__)

Base = declarative_base()

T = TypeVar("T")


def is_memory_sqlite(url: str) -> bool:
    """In-memory SQLite runs on a single static connection, not a sized pool."""
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (
        None,
        "",
        ":memory:",
    )


class PageRecord(Base):
    __tablename__ = "pages"
    # AUTOINCREMENT keeps SQLite from handing out the id of a deleted row
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    name = Column(String(255), unique=True, nullable=False)
    content = Column(Text, nullable=False, default="")


class PageStore(ABC):
    """Abstract base class for page storage."""

    @abstractmethod
    async def init_schema(self) -> None:
        """Create the pages table if it does not exist."""
        ...

    @abstractmethod
    async def list_names(self) -> list[str]:
        """List all page names in ascending order."""
        ...

    @abstractmethod
    async def get_by_name(self, name: str) -> Page | None:
        """Get a page by name. Returns None if not found."""
        ...

    @abstractmethod
    async def create(self, name: str, content: str) -> int:
        """Insert a new page and return its id."""
        ...

    @abstractmethod
    async def update(self, page_id: int, content: str) -> None:
        """Replace the content of an existing page."""
        ...

    @abstractmethod
    async def delete(self, page_id: int) -> None:
        """Delete a page. Deleting a missing id is not an error."""
        ...

    @abstractmethod
    async def dispose(self) -> None:
        """Release every pooled connection."""
        ...


class SQLPageStore(PageStore):
    """Page storage on top of an async SQLAlchemy engine.

    Every operation checks a connection out of a bounded pool, runs in
    its own transaction and gives the connection back on every exit path.
    Name uniqueness and id allocation are left to the database.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 30,
        pool_timeout: float = 5.0,
        query_timeout: float = 10.0,
        engine: AsyncEngine | None = None,
    ):
        self.query_timeout = query_timeout
        if engine is None:
            pool_args = {}
            if not is_memory_sqlite(url):
                pool_args = {
                    "pool_size": pool_size,
                    "max_overflow": 0,
                    "pool_timeout": pool_timeout,
                    "pool_pre_ping": True,
                }
            engine = create_async_engine(url, **pool_args)
        self.engine = engine

    async def _run(
        self,
        operation: str,
        work: Callable[[AsyncConnection], Awaitable[T]],
    ) -> T:
        """Run ``work`` inside one pooled transaction, translating failures."""

        async def in_transaction() -> T:
            async with self.engine.begin() as conn:
                return await work(conn)

        try:
            return await asyncio.wait_for(in_transaction(), timeout=self.query_timeout)
        except asyncio.TimeoutError as e:
            logger.warning("%s exceeded %.1fs deadline", operation, self.query_timeout)
            raise Timeout(operation) from e
        except PoolTimeoutError as e:
            logger.warning("%s could not get a pooled connection: %s", operation, e)
            raise Timeout(operation) from e
        except IntegrityError as e:
            logger.warning("%s violated a constraint: %s", operation, e.orig)
            raise ConstraintViolation(operation) from e
        except (DBAPIError, SQLAlchemyError, OSError) as e:
            logger.exception("%s failed", operation)
            raise ConnectionFailure(operation) from e

    async def init_schema(self) -> None:
        """Create the pages table if it does not exist."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            logger.exception("Could not create tables")
            raise SchemaInitFailure(str(e)) from e
        logger.info("Tables ready at %s", self.engine.url.render_as_string())

    async def list_names(self) -> list[str]:
        """List all page names in ascending order."""

        async def work(conn: AsyncConnection) -> list[str]:
            result = await conn.execute(
                select(PageRecord.name).order_by(PageRecord.name)
            )
            return list(result.scalars())

        return await self._run("list_names", work)

    async def get_by_name(self, name: str) -> Page | None:
        """Get a page by name."""

        async def work(conn: AsyncConnection) -> Page | None:
            result = await conn.execute(
                select(PageRecord.id, PageRecord.content).where(
                    PageRecord.name == name
                )
            )
            row = result.first()
            if row is None:
                return None
            return Page(id=row.id, name=name, content=row.content)

        return await self._run("get_by_name", work)

    async def create(self, name: str, content: str) -> int:
        """Insert a new page.

        Raises:
            ConstraintViolation: if a page called ``name`` already exists.
        """

        async def work(conn: AsyncConnection) -> int:
            result = await conn.execute(
                insert(PageRecord).values(name=name, content=content)
            )
            return result.inserted_primary_key[0]

        page_id = await self._run("create", work)
        logger.info("Created page %r with id %d", name, page_id)
        return page_id

    async def update(self, page_id: int, content: str) -> None:
        """Replace the content of an existing page.

        Raises:
            NotFound: if no page has ``page_id``.
        """

        async def work(conn: AsyncConnection) -> int:
            result = await conn.execute(
                update(PageRecord)
                .where(PageRecord.id == page_id)
                .values(content=content)
            )
            return result.rowcount

        if await self._run("update", work) == 0:
            logger.warning("No page with id %d to update", page_id)
            raise NotFound(str(page_id))
        logger.info("Updated page %d", page_id)

    async def delete(self, page_id: int) -> None:
        """Delete a page. Deleting a missing id is not an error."""

        async def work(conn: AsyncConnection) -> int:
            result = await conn.execute(
                delete(PageRecord).where(PageRecord.id == page_id)
            )
            return result.rowcount

        deleted = await self._run("delete", work)
        logger.info("Deleted page %d (%d rows)", page_id, deleted)

    async def dispose(self) -> None:
        """Release every pooled connection."""
        await self.engine.dispose()
        logger.info("Database engine disposed")
