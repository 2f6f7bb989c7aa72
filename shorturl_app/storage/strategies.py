"""
Store strategies using Strategy Pattern.

Allows switching between different backends for the path -> destination
mapping:
- Redis: one key per path, value is the destination, no expiry
- SQL: one table with a unique index on path (SQLite, PostgreSQL, ...)
- In-Memory: development and testing
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import redis
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from shorturl_app.logging_config import get_logger
from shorturl_app.models.short_url import ShortUrl
from shorturl_app.models.url import ShortUrlRecord
from shorturl_app.services.exceptions import InvalidCursor

logger = get_logger(__name__)


class StoreError(Exception):
    """Raised when the backing store fails to answer or apply an operation"""


@dataclass
class ScanPage:
    """
    One bounded page of an enumeration.

    next_cursor is None once the enumeration is complete; otherwise pass it
    back to scan() to continue.
    """
    entries: List[ShortUrl] = field(default_factory=list)
    next_cursor: Optional[str] = None


class StoreStrategy(ABC):
    """
    Abstract base class for store strategies.

    The store is the sole owner of short URL data; strategies hold no
    cached copy across calls.

    All methods are async because store operations involve I/O.
    """

    @abstractmethod
    async def add_if_absent(self, short_url: ShortUrl) -> Optional[ShortUrl]:
        """
        Atomically store the entry unless its path is already taken.

        Returns:
            The stored entry, or None if the path already exists
        """
        pass

    @abstractmethod
    async def get(self, path: str) -> Optional[ShortUrl]:
        """Get the entry for a path, or None"""
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete the entry for a path.

        Returns:
            True if an entry was removed, False otherwise
        """
        pass

    @abstractmethod
    async def scan(self, cursor: Optional[str] = None, count: int = 100) -> ScanPage:
        """
        Enumerate entries one page at a time.

        Args:
            cursor: Cursor returned by the previous page, None to start over
            count: Upper bound hint for the page size

        Returns:
            ScanPage with the entries and the cursor for the next page

        Raises:
            InvalidCursor: If the cursor was not issued by this store
        """
        pass

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass


class RedisStore(StoreStrategy):
    """
    Redis store implementation.

    Each short URL is a single string key (the path, optionally prefixed)
    holding the destination. Creation uses SET NX so two concurrent
    creations of the same path cannot both succeed.
    """

    def __init__(self, redis_client, key_prefix: str = ""):
        """
        Initialize Redis store.

        Args:
            redis_client: Redis client instance (redis.Redis)
            key_prefix: Prepended to every path to form the key
        """
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _key(self, path: str) -> str:
        return f"{self.key_prefix}{path}"

    def _path(self, key) -> str:
        if isinstance(key, bytes):
            key = key.decode("utf-8")
        return key[len(self.key_prefix):]

    @staticmethod
    def _decode(value) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def add_if_absent(self, short_url: ShortUrl) -> Optional[ShortUrl]:
        try:
            was_set = self.redis.set(
                self._key(short_url.path), short_url.destination, nx=True
            )
        except redis.RedisError as e:
            logger.error(f"Redis set error for '{short_url.path}': {e}")
            raise StoreError(str(e)) from e
        if not was_set:
            return None
        return ShortUrl(path=short_url.path, destination=short_url.destination)

    async def get(self, path: str) -> Optional[ShortUrl]:
        try:
            value = self._decode(self.redis.get(self._key(path)))
        except redis.RedisError as e:
            logger.error(f"Redis get error for '{path}': {e}")
            raise StoreError(str(e)) from e
        if not value:
            return None
        return ShortUrl(path=path, destination=value)

    async def exists(self, path: str) -> bool:
        try:
            return bool(self.redis.exists(self._key(path)))
        except redis.RedisError as e:
            logger.error(f"Redis exists error for '{path}': {e}")
            raise StoreError(str(e)) from e

    async def delete(self, path: str) -> bool:
        try:
            return bool(self.redis.delete(self._key(path)))
        except redis.RedisError as e:
            logger.error(f"Redis delete error for '{path}': {e}")
            raise StoreError(str(e)) from e

    @staticmethod
    def _scan_cursor(cursor: Optional[str]) -> int:
        if not cursor:
            return 0
        try:
            value = int(cursor)
        except ValueError:
            raise InvalidCursor(cursor)
        if value < 0:
            raise InvalidCursor(cursor)
        return value

    async def scan(self, cursor: Optional[str] = None, count: int = 100) -> ScanPage:
        """
        One SCAN step followed by MGET of the returned keys.

        SCAN may return a key more than once over a full iteration and
        gives no ordering guarantee; callers deduplicate. Keys deleted
        between SCAN and MGET are skipped.

        Raises:
            InvalidCursor: If the cursor is not a SCAN cursor
        """
        start = self._scan_cursor(cursor)
        try:
            next_cursor, keys = self.redis.scan(
                cursor=start,
                match=f"{self.key_prefix}*",
                count=count,
            )
            values = self.redis.mget(keys) if keys else []
        except redis.RedisError as e:
            logger.error(f"Redis scan error: {e}")
            raise StoreError(str(e)) from e

        entries = []
        for key, value in zip(keys, values):
            destination = self._decode(value)
            if destination:
                entries.append(ShortUrl(path=self._path(key), destination=destination))

        next_cursor = int(next_cursor)
        return ScanPage(
            entries=entries,
            next_cursor=str(next_cursor) if next_cursor != 0 else None,
        )

    async def ping(self) -> bool:
        try:
            return bool(self.redis.ping())
        except redis.RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    async def close(self) -> None:
        self.redis.close()
        logger.info("Redis connection closed")


class SQLStore(StoreStrategy):
    """
    Relational store implementation using SQLAlchemy.

    The unique index on path is what makes creation atomic: a losing
    concurrent INSERT fails with IntegrityError instead of overwriting.
    Each operation runs in its own short-lived session.
    """

    def __init__(self, session_factory: sessionmaker, engine=None):
        """
        Initialize SQL store.

        Args:
            session_factory: Session factory bound to the database engine
            engine: Engine to dispose on close (optional)
        """
        self.session_factory = session_factory
        self.engine = engine

    @staticmethod
    def _to_short_url(record: ShortUrlRecord) -> ShortUrl:
        return ShortUrl(path=record.path, destination=record.destination, id=record.id)

    async def add_if_absent(self, short_url: ShortUrl) -> Optional[ShortUrl]:
        with self.session_factory() as session:
            record = ShortUrlRecord(path=short_url.path, destination=short_url.destination)
            session.add(record)
            try:
                session.commit()
                session.refresh(record)
            except IntegrityError:
                session.rollback()
                return None
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"SQL insert error for '{short_url.path}': {e}")
                raise StoreError(str(e)) from e
            return self._to_short_url(record)

    async def get(self, path: str) -> Optional[ShortUrl]:
        try:
            with self.session_factory() as session:
                record = session.execute(
                    select(ShortUrlRecord).where(ShortUrlRecord.path == path)
                ).scalar_one_or_none()
                if record is None or not record.destination:
                    return None
                return self._to_short_url(record)
        except SQLAlchemyError as e:
            logger.error(f"SQL select error for '{path}': {e}")
            raise StoreError(str(e)) from e

    async def exists(self, path: str) -> bool:
        try:
            with self.session_factory() as session:
                found = session.execute(
                    select(ShortUrlRecord.id).where(ShortUrlRecord.path == path)
                ).first()
                return found is not None
        except SQLAlchemyError as e:
            logger.error(f"SQL exists error for '{path}': {e}")
            raise StoreError(str(e)) from e

    async def delete(self, path: str) -> bool:
        try:
            with self.session_factory() as session:
                deleted = (
                    session.query(ShortUrlRecord)
                    .filter(ShortUrlRecord.path == path)
                    .delete(synchronize_session=False)
                )
                session.commit()
                return deleted > 0
        except SQLAlchemyError as e:
            logger.error(f"SQL delete error for '{path}': {e}")
            raise StoreError(str(e)) from e

    async def scan(self, cursor: Optional[str] = None, count: int = 100) -> ScanPage:
        """Keyset pagination ordered by path; the cursor is the last path seen"""
        try:
            with self.session_factory() as session:
                query = select(ShortUrlRecord).order_by(ShortUrlRecord.path).limit(count)
                if cursor:
                    query = query.where(ShortUrlRecord.path > cursor)
                records = session.execute(query).scalars().all()
                entries = [self._to_short_url(record) for record in records]
        except SQLAlchemyError as e:
            logger.error(f"SQL scan error: {e}")
            raise StoreError(str(e)) from e

        next_cursor = entries[-1].path if len(entries) == count else None
        return ScanPage(entries=entries, next_cursor=next_cursor)

    async def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()


class InMemoryStore(StoreStrategy):
    """
    In-process store backed by a dict, for development and tests.

    Entries live only as long as the process: nothing is shared between
    workers and everything is gone after a restart. Methods are async to
    match the other stores.
    """

    def __init__(self):
        self._entries: Dict[str, str] = {}

    async def add_if_absent(self, short_url: ShortUrl) -> Optional[ShortUrl]:
        if short_url.path in self._entries:
            return None
        self._entries[short_url.path] = short_url.destination
        return ShortUrl(path=short_url.path, destination=short_url.destination)

    async def get(self, path: str) -> Optional[ShortUrl]:
        destination = self._entries.get(path)
        if not destination:
            return None
        return ShortUrl(path=path, destination=destination)

    async def exists(self, path: str) -> bool:
        return path in self._entries

    async def delete(self, path: str) -> bool:
        return self._entries.pop(path, None) is not None

    async def scan(self, cursor: Optional[str] = None, count: int = 100) -> ScanPage:
        """Sorted key snapshot; the cursor is the last path seen"""
        paths = sorted(p for p in self._entries if cursor is None or p > cursor)[:count]
        entries = [ShortUrl(path=p, destination=self._entries[p]) for p in paths]
        next_cursor = paths[-1] if len(paths) == count else None
        return ScanPage(entries=entries, next_cursor=next_cursor)
