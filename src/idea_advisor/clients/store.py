"""
Document stores backing the portal repository.

A store holds JSON documents grouped into named collections and keyed by an
opaque string. Iteration order is insertion order, which is what the
repository's list/query operations expose.

- InMemoryStore: process-local dict, used by tests and single-user runs
- SqlDocumentStore: SQLAlchemy 2.0 async engine + asyncpg over a single
  JSONB table, used in production
"""

from __future__ import annotations

import json
from typing import Any, Protocol
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from ..errors import StorageError

logger = structlog.get_logger(__name__)

TABLE_NAME = 'portal_documents'


class DocumentStore(Protocol):
    """Minimal get/put/delete/all contract the repository depends on."""

    async def get(self, collection: str, key: str) -> dict[str, Any] | None: ...

    async def put(self, collection: str, key: str, document: dict[str, Any]) -> None: ...

    async def delete(self, collection: str, key: str) -> bool: ...

    async def all(self, collection: str) -> list[dict[str, Any]]: ...

    async def verify_connectivity(self) -> bool: ...

    async def close(self) -> None: ...


class InMemoryStore:
    """Dict-of-dicts store. Documents are copied in and out."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        doc = self._collections.get(collection, {}).get(key)
        return json.loads(json.dumps(doc)) if doc is not None else None

    async def put(self, collection: str, key: str, document: dict[str, Any]) -> None:
        # Round-trip through JSON so stored state matches the SQL store exactly
        self._collections.setdefault(collection, {})[key] = json.loads(json.dumps(document))

    async def delete(self, collection: str, key: str) -> bool:
        return self._collections.get(collection, {}).pop(key, None) is not None

    async def all(self, collection: str) -> list[dict[str, Any]]:
        return [json.loads(json.dumps(d)) for d in self._collections.get(collection, {}).values()]

    async def verify_connectivity(self) -> bool:
        return True

    async def close(self) -> None:
        return None


def _sanitize_url(url: str) -> str:
    """Remove URL query params that asyncpg does not understand.

    Hosted Postgres URLs often include ``channel_binding=require`` and
    ``sslmode=require`` which are libpq parameters. asyncpg rejects unknown
    connection params.
    """
    _STRIP_PARAMS = {'channel_binding', 'sslmode'}
    parsed = urlparse(url)
    if not parsed.query:
        return url
    params = parse_qs(parsed.query)
    filtered = {k: v for k, v in params.items() if k not in _STRIP_PARAMS}
    new_query = urlencode(filtered, doseq=True)
    return urlunparse(parsed._replace(query=new_query))


def _normalize_driver(url: str) -> str:
    """Force the asyncpg driver prefix on Postgres URLs."""
    if url.startswith('postgres://'):
        return url.replace('postgres://', 'postgresql+asyncpg://', 1)
    if url.startswith('postgresql://') and '+asyncpg' not in url:
        return url.replace('postgresql://', 'postgresql+asyncpg://', 1)
    return url


class SqlDocumentStore:
    """
    Postgres-backed document store.

    One table keyed by (collection, key) with a BIGSERIAL ``seq`` column that
    preserves insertion order across upserts.
    """

    def __init__(self, database_url: str | None = None):
        self._engine: AsyncEngine | None = None
        self._database_url = database_url

    async def connect(self, database_url: str | None = None) -> None:
        """
        Create the async engine and ensure the table exists.
        Idempotent: no-op if already connected.
        """
        if self._engine is not None:
            return

        url = database_url or self._database_url
        if not url:
            raise ValueError('database_url is required')

        url = _normalize_driver(_sanitize_url(url))

        self._engine = create_async_engine(
            url,
            pool_size=5,
            max_overflow=5,
            pool_pre_ping=True,
            pool_timeout=30,
        )
        await self.setup_schema()
        logger.info('store.connected', table=TABLE_NAME)

    async def setup_schema(self) -> None:
        sql = text(f"""
            CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                seq BIGSERIAL,
                collection TEXT NOT NULL,
                key TEXT NOT NULL,
                body JSONB NOT NULL,
                PRIMARY KEY (collection, key)
            )
        """)
        try:
            async with self.engine.begin() as conn:
                await conn.execute(sql)
        except Exception as e:
            raise StorageError(f'Failed to create {TABLE_NAME}: {e}') from e

    async def close(self) -> None:
        """Dispose of the engine and connection pool."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            logger.info('store.closed')

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError('SqlDocumentStore not connected, call connect() first')
        return self._engine

    async def verify_connectivity(self) -> bool:
        """Return True if we can execute a simple query."""
        try:
            async with self.engine.begin() as conn:
                await conn.execute(text('SELECT 1'))
            return True
        except Exception:
            logger.exception('store.connectivity_check_failed')
            return False

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        sql = text(
            f'SELECT body FROM {TABLE_NAME} WHERE collection = :collection AND key = :key'
        )
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(sql, {'collection': collection, 'key': key})
                row = result.first()
        except Exception as e:
            raise StorageError(
                f'Failed to read document: {e}',
                context={'collection': collection, 'key': key},
            ) from e
        if row is None:
            return None
        return _decode(row[0])

    async def put(self, collection: str, key: str, document: dict[str, Any]) -> None:
        sql = text(f"""
            INSERT INTO {TABLE_NAME} (collection, key, body)
            VALUES (:collection, :key, CAST(:body AS JSONB))
            ON CONFLICT (collection, key) DO UPDATE SET body = EXCLUDED.body
        """)
        try:
            async with self.engine.begin() as conn:
                await conn.execute(
                    sql,
                    {'collection': collection, 'key': key, 'body': json.dumps(document)},
                )
        except Exception as e:
            raise StorageError(
                f'Failed to write document: {e}',
                context={'collection': collection, 'key': key},
            ) from e

    async def delete(self, collection: str, key: str) -> bool:
        sql = text(f'DELETE FROM {TABLE_NAME} WHERE collection = :collection AND key = :key')
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(sql, {'collection': collection, 'key': key})
        except Exception as e:
            raise StorageError(
                f'Failed to delete document: {e}',
                context={'collection': collection, 'key': key},
            ) from e
        return (result.rowcount or 0) > 0

    async def all(self, collection: str) -> list[dict[str, Any]]:
        sql = text(
            f'SELECT body FROM {TABLE_NAME} WHERE collection = :collection ORDER BY seq'
        )
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(sql, {'collection': collection})
                rows = result.fetchall()
        except Exception as e:
            raise StorageError(
                f'Failed to list documents: {e}',
                context={'collection': collection},
            ) from e
        return [_decode(row[0]) for row in rows]


def _decode(body: Any) -> dict[str, Any]:
    # asyncpg returns JSONB as str unless a codec is registered
    if isinstance(body, (str, bytes)):
        return json.loads(body)
    return body


async def create_store(database_url: str | None) -> DocumentStore:
    """Build and connect the store selected by ``database_url``."""
    if not database_url:
        logger.info('store.in_memory')
        return InMemoryStore()
    store = SqlDocumentStore(database_url)
    await store.connect()
    return store
