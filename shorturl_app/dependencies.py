"""
FastAPI dependencies for dependency injection.

The store is created once at startup (see main.lifespan) and kept on
app.state; routes receive a repository wrapping it.

Pattern: Dependency Injection
- No module-level store handle
- Easy to test (pass an in-memory store to create_app)
"""

from fastapi import Depends, Request

from shorturl_app.config import Settings
from shorturl_app.services.repository import ShortUrlRepository
from shorturl_app.storage.strategies import StoreStrategy


def get_settings(request: Request) -> Settings:
    """Get the settings the application was created with"""
    return request.app.state.config


def get_store(request: Request) -> StoreStrategy:
    """Get the store created at application startup"""
    return request.app.state.store


def get_repository(store: StoreStrategy = Depends(get_store)) -> ShortUrlRepository:
    """
    Get ShortUrlRepository with the store injected.

    Controllers depend on the repository, the repository depends on the
    store.
    """
    return ShortUrlRepository(store)
