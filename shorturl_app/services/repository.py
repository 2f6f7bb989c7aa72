from typing import AsyncIterator, List, Optional

from shorturl_app.logging_config import get_logger
from shorturl_app.models.short_url import ShortUrl
from shorturl_app.services.exceptions import (
    DeletionFailure,
    NotFound,
    PathAlreadyInUse,
    PersistenceFailure,
)
from shorturl_app.storage.strategies import ScanPage, StoreError, StoreStrategy

logger = get_logger(__name__)


class ShortUrlRepository:
    """
    CRUD over short URLs keyed by path.

    The store is injected, so the same repository serves the API (one per
    request, sharing the application's store) and the CLI (one per
    process). Callers validate input before calling create(); the
    repository only enforces uniqueness.
    """

    def __init__(self, store: StoreStrategy):
        self.store = store

    async def exists(self, path: str) -> bool:
        try:
            return await self.store.exists(path)
        except StoreError as e:
            raise PersistenceFailure(f"Failed to look up path '{path}'.") from e

    async def create(self, short_url: ShortUrl) -> ShortUrl:
        """
        Persist a new short URL.

        Uses the store's atomic set-if-absent write, so there is no window
        between the uniqueness check and the write.

        Raises:
            PathAlreadyInUse: If the path is already mapped
            PersistenceFailure: If the store does not apply the write
        """
        try:
            stored = await self.store.add_if_absent(short_url)
        except StoreError as e:
            raise PersistenceFailure("Failed to create shortened URL.") from e

        if stored is None:
            raise PathAlreadyInUse(short_url.path)

        logger.info(f"Created short URL '{stored.path}' -> {stored.destination}")
        return stored

    async def get_by_path(self, path: str) -> Optional[ShortUrl]:
        """Return the stored entry, or None when the path is unknown"""
        try:
            return await self.store.get(path)
        except StoreError as e:
            raise PersistenceFailure(f"Failed to look up path '{path}'.") from e

    async def delete(self, path: str) -> None:
        """
        Delete a short URL.

        Raises:
            NotFound: If no entry exists for the path
            DeletionFailure: If the store does not delete the entry
        """
        if not await self.exists(path):
            raise NotFound(path)

        try:
            deleted = await self.store.delete(path)
        except StoreError as e:
            raise DeletionFailure("Failed to delete shortened URL.") from e

        if not deleted:
            raise DeletionFailure("Failed to delete shortened URL.")

        logger.info(f"Deleted short URL '{path}'")

    async def list_page(
        self,
        cursor: Optional[str] = None,
        page_size: int = 100,
    ) -> ScanPage:
        """Fetch a single bounded page; pass next_cursor back to continue"""
        try:
            return await self.store.scan(cursor=cursor, count=page_size)
        except StoreError as e:
            raise PersistenceFailure("Failed to list shortened URLs.") from e

    async def iter_pages(
        self,
        page_size: int = 100,
        cursor: Optional[str] = None,
    ) -> AsyncIterator[List[ShortUrl]]:
        """
        Yield bounded pages of entries, starting at cursor.

        Each call starts a fresh enumeration, so the sequence is
        restartable. Empty pages from the store are skipped.
        """
        while True:
            page = await self.list_page(cursor=cursor, page_size=page_size)
            if page.entries:
                yield page.entries
            if page.next_cursor is None:
                return
            cursor = page.next_cursor

    async def list_all(self, page_size: int = 100) -> AsyncIterator[ShortUrl]:
        """
        Lazily enumerate every stored entry, one page at a time.

        Ordering is unspecified. A path seen on an earlier page is not
        yielded again.
        """
        seen = set()
        async for page in self.iter_pages(page_size=page_size):
            for short_url in page:
                if short_url.path in seen:
                    continue
                seen.add(short_url.path)
                yield short_url
