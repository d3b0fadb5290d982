"""Database management with PostgreSQL via asyncpg."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import asyncpg
from fastapi import Request

from ..config import settings
from ..models.user import UserRecord

logger = logging.getLogger(__name__)

# Arbitrary constant shared by every process running the schema script
SCHEMA_LOCK_ID = 7_340_021

USER_COLUMNS = "subject_id, display_name, email, avatar_url, handle, created_at, last_seen_at"


class StoreUnavailable(Exception):
    """The database could not be reached or is not connected."""


class HandleTaken(Exception):
    """Another user already holds the handle (case-insensitively)."""

    def __init__(self, handle: str):
        super().__init__(f"Handle {handle!r} is already taken")
        self.handle = handle


class DuplicateCardName(Exception):
    """The owner already has a card with this name (case-insensitively)."""

    def __init__(self, name: str):
        super().__init__(f"A card named {name!r} already exists")
        self.name = name


def _user_from_row(row: asyncpg.Record | None) -> UserRecord | None:
    if row is None:
        return None
    return UserRecord(**dict(row))


class Database:
    """Async PostgreSQL database manager using asyncpg.

    One instance is created per process at start-up and shared by all
    requests. connect() may be awaited concurrently; the pool and the schema
    are set up once.
    """

    def __init__(self, db_url: str):
        """Initialize database with connection URL."""
        self.db_url = db_url
        self._pool: asyncpg.Pool | None = None
        self._connect_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """Establish database connection pool and initialize schema."""
        async with self._connect_lock:
            if self._pool is not None:
                return

            try:
                pool = await asyncpg.create_pool(
                    self.db_url,
                    min_size=settings.database_pool_min_size,
                    max_size=settings.database_pool_max_size,
                    command_timeout=60,
                )
            except (OSError, asyncpg.PostgresError) as e:
                raise StoreUnavailable(f"Could not connect to database: {e}") from e

            from .schema import INIT_SCHEMA

            try:
                # Serialise schema creation across processes sharing the database
                async with pool.acquire() as conn:
                    async with conn.transaction():
                        await conn.execute("SELECT pg_advisory_xact_lock($1)", SCHEMA_LOCK_ID)
                        await conn.execute(INIT_SCHEMA)
            except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
                await pool.close()
                raise StoreUnavailable(f"Could not initialize schema: {e}") from e

            self._pool = pool

        logger.info(f"Database connected: {self.db_url.split('@')[-1]}")  # Don't log password

    async def disconnect(self) -> None:
        """Close database connection pool."""
        async with self._connect_lock:
            if self._pool:
                await self._pool.close()
                self._pool = None
                logger.info("Database disconnected")

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a pooled connection, mapping connectivity failures to StoreUnavailable."""
        if self._pool is None:
            # Lazy first connect; concurrent callers share one pool
            await self.connect()

        try:
            async with self._pool.acquire() as conn:
                yield conn
        except (
            OSError,
            asyncio.TimeoutError,
            asyncpg.PostgresConnectionError,
            asyncpg.InterfaceError,
        ) as e:
            logger.error(f"Database operation failed: {e}")
            raise StoreUnavailable(str(e)) from e

    async def ping(self) -> bool:
        """Run a trivial query."""
        async with self._connection() as conn:
            return await conn.fetchval("SELECT 1") == 1

    # User operations
    async def upsert_user(
        self, subject_id: str, display_name: str, email: str, avatar_url: str
    ) -> UserRecord:
        """Create or refresh a user in one statement.

        Existing rows get their login-derived fields and last_seen_at
        overwritten; handle and created_at are only ever set on insert.
        """
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO users (subject_id, display_name, email, avatar_url)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT (subject_id) DO UPDATE SET
                    display_name = EXCLUDED.display_name,
                    email = EXCLUDED.email,
                    avatar_url = EXCLUDED.avatar_url,
                    last_seen_at = clock_timestamp()
                RETURNING {USER_COLUMNS}
                """,
                subject_id,
                display_name,
                email,
                avatar_url,
            )

        logger.debug(f"Upserted user: {subject_id}")
        return _user_from_row(row)

    async def get_user(self, subject_id: str) -> UserRecord | None:
        """Get user by subject id."""
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {USER_COLUMNS} FROM users WHERE subject_id = $1", subject_id
            )
        return _user_from_row(row)

    async def find_user_by_handle(self, handle: str) -> UserRecord | None:
        """Get user whose handle matches case-insensitively."""
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {USER_COLUMNS} FROM users WHERE lower(handle) = lower($1)", handle
            )
        return _user_from_row(row)

    async def find_user_by_email(self, email: str) -> UserRecord | None:
        """Get the oldest user whose email matches case-insensitively."""
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {USER_COLUMNS} FROM users
                WHERE lower(email) = lower($1)
                ORDER BY created_at
                LIMIT 1
                """,
                email,
            )
        return _user_from_row(row)

    async def set_user_handle(self, subject_id: str, handle: str) -> UserRecord | None:
        """Set a user's handle.

        Raises:
            HandleTaken: If another user holds the handle, in any letter case
        """
        try:
            async with self._connection() as conn:
                row = await conn.fetchrow(
                    f"UPDATE users SET handle = $2 WHERE subject_id = $1 RETURNING {USER_COLUMNS}",
                    subject_id,
                    handle,
                )
        except asyncpg.UniqueViolationError as e:
            raise HandleTaken(handle) from e

        logger.debug(f"Set handle for {subject_id}: {handle}")
        return _user_from_row(row)

    # Card operations
    async def list_cards(self, owner_id: str) -> list[dict[str, Any]]:
        """List all cards of an owner, oldest first."""
        async with self._connection() as conn:
            rows = await conn.fetch(
                "SELECT * FROM cards WHERE owner_id = $1 ORDER BY created_at, card_id",
                owner_id,
            )
        return [dict(row) for row in rows]

    async def get_card(self, card_id: str, owner_id: str) -> dict[str, Any] | None:
        """Get card by ID for a specific owner."""
        async with self._connection() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM cards WHERE card_id = $1 AND owner_id = $2", card_id, owner_id
            )
        return dict(row) if row else None

    async def create_card(
        self,
        card_id: str,
        owner_id: str,
        name: str,
        description: str = "",
        image: str = "",
        image_public_id: str | None = None,
        score: float = 0.0,
        categories: list[str] | None = None,
    ) -> dict[str, Any]:
        """Create a new card.

        Raises:
            DuplicateCardName: If the owner already has a card with this name
        """
        try:
            async with self._connection() as conn:
                row = await conn.fetchrow(
                    """
                    INSERT INTO cards (
                        card_id, owner_id, name, description, image,
                        image_public_id, score, categories
                    )
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                    RETURNING *
                    """,
                    card_id,
                    owner_id,
                    name,
                    description,
                    image,
                    image_public_id,
                    score,
                    categories or [],
                )
        except asyncpg.UniqueViolationError as e:
            raise DuplicateCardName(name) from e

        logger.debug(f"Created card: {card_id}")
        return dict(row)

    async def update_card(self, card_id: str, owner_id: str, **kwargs: Any) -> dict[str, Any] | None:
        """Update card fields. Returns None if the owner has no such card.

        Raises:
            DuplicateCardName: If the new name clashes with another of the owner's cards
        """
        if not kwargs:
            return await self.get_card(card_id, owner_id)

        updates: list[str] = []
        params: list[Any] = []
        for key, value in kwargs.items():
            params.append(value)
            updates.append(f"{key} = ${len(params)}")

        params.extend([card_id, owner_id])

        try:
            async with self._connection() as conn:
                row = await conn.fetchrow(
                    f"UPDATE cards SET {', '.join(updates)} "
                    f"WHERE card_id = ${len(params) - 1} AND owner_id = ${len(params)} "
                    "RETURNING *",
                    *params,
                )
        except asyncpg.UniqueViolationError as e:
            raise DuplicateCardName(kwargs.get("name", "")) from e

        logger.debug(f"Updated card: {card_id}")
        return dict(row) if row else None

    async def delete_card(self, card_id: str, owner_id: str) -> bool:
        """Delete card."""
        async with self._connection() as conn:
            result = await conn.execute(
                "DELETE FROM cards WHERE card_id = $1 AND owner_id = $2", card_id, owner_id
            )

        deleted = result.split()[-1] != "0" if result else False
        if deleted:
            logger.debug(f"Deleted card: {card_id}")
        return deleted

    async def count_cards(self, owner_id: str) -> int:
        """Count total cards for an owner."""
        async with self._connection() as conn:
            count = await conn.fetchval("SELECT COUNT(*) FROM cards WHERE owner_id = $1", owner_id)
        return count or 0

    # Category operations
    async def list_categories(self, owner_id: str) -> list[dict[str, Any]]:
        """List all categories of an owner, oldest first."""
        async with self._connection() as conn:
            rows = await conn.fetch(
                "SELECT * FROM categories WHERE owner_id = $1 ORDER BY created_at, category_id",
                owner_id,
            )
        return [dict(row) for row in rows]

    async def create_category(self, category_id: str, owner_id: str, name: str) -> dict[str, Any]:
        """Create a new category."""
        async with self._connection() as conn:
            row = await conn.fetchrow(
                """
                INSERT INTO categories (category_id, owner_id, name)
                VALUES ($1, $2, $3)
                RETURNING *
                """,
                category_id,
                owner_id,
                name,
            )

        logger.debug(f"Created category: {category_id}")
        return dict(row)

    async def rename_category(
        self, category_id: str, owner_id: str, name: str
    ) -> dict[str, Any] | None:
        """Rename a category. Returns None if the owner has no such category."""
        async with self._connection() as conn:
            row = await conn.fetchrow(
                """
                UPDATE categories SET name = $3
                WHERE category_id = $1 AND owner_id = $2
                RETURNING *
                """,
                category_id,
                owner_id,
                name,
            )
        return dict(row) if row else None

    async def delete_category(self, category_id: str, owner_id: str) -> bool:
        """Delete a category and pull its id from the owner's cards."""
        async with self._connection() as conn:
            async with conn.transaction():
                result = await conn.execute(
                    "DELETE FROM categories WHERE category_id = $1 AND owner_id = $2",
                    category_id,
                    owner_id,
                )
                if result.split()[-1] == "0":
                    return False

                await conn.execute(
                    """
                    UPDATE cards SET categories = array_remove(categories, $1)
                    WHERE owner_id = $2 AND $1 = ANY(categories)
                    """,
                    category_id,
                    owner_id,
                )

        logger.debug(f"Deleted category: {category_id}")
        return True


def create_database() -> Database:
    """Build the process-wide Database from settings (not yet connected)."""
    return Database(settings.get_database_url())


async def get_db(request: Request) -> Database:
    """Dependency returning the Database created at application start-up."""
    return request.app.state.db
