"""
Test configuration and fixtures for the short URL service.
This centralizes all test setup, making individual tests clean.
"""

import fnmatch

import pytest
import redis
from fastapi.testclient import TestClient

from main import create_app
from shorturl_app.config import Settings
from shorturl_app.database.connection import (
    create_db_engine,
    create_session_factory,
    init_db,
)
from shorturl_app.services.repository import ShortUrlRepository
from shorturl_app.storage import InMemoryStore, RedisStore, SQLStore


class FakeRedis:
    """
    Minimal synchronous stand-in for redis.Redis(decode_responses=True).

    Supports the commands RedisStore issues. Set `fail` to make every
    command raise redis.ConnectionError.
    """

    def __init__(self):
        self.data = {}
        self.fail = False
        self.closed = False

    def _check(self):
        if self.fail:
            raise redis.ConnectionError("connection refused")

    def set(self, key, value, nx=False):
        self._check()
        if nx and key in self.data:
            return None
        self.data[key] = value
        return True

    def get(self, key):
        self._check()
        return self.data.get(key)

    def mget(self, keys):
        self._check()
        return [self.data.get(key) for key in keys]

    def exists(self, key):
        self._check()
        return 1 if key in self.data else 0

    def delete(self, key):
        self._check()
        return 1 if self.data.pop(key, None) is not None else 0

    def scan(self, cursor=0, match=None, count=None):
        self._check()
        keys = sorted(k for k in self.data if match is None or fnmatch.fnmatchcase(k, match))
        count = count or 10
        page = keys[cursor:cursor + count]
        next_cursor = cursor + count
        return (next_cursor if next_cursor < len(keys) else 0), page

    def ping(self):
        self._check()
        return True

    def close(self):
        self.closed = True


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def redis_store(fake_redis):
    return RedisStore(fake_redis)


@pytest.fixture
def sql_store(tmp_path):
    """
    SQLite-backed store in a fresh database file for each test.
    """
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    store = SQLStore(create_session_factory(engine), engine=engine)
    yield store
    engine.dispose()


@pytest.fixture(params=["memory", "redis", "sql"])
def store(request):
    """Every store backend, so contract tests run against all of them"""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def repository(store):
    return ShortUrlRepository(store)


@pytest.fixture
def test_settings():
    return Settings(store_backend="memory", forwarder_base_url=None, log_level="WARNING")


@pytest.fixture
def client(memory_store, test_settings):
    """
    Create a test client backed by an in-memory store.
    This is the main fixture that API tests will use.
    """
    app = create_app(store=memory_store, config=test_settings)

    with TestClient(app) as test_client:
        yield test_client

