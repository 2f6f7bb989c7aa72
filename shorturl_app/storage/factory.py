"""
Factory for creating store instances.
Each caller gets its own store and is responsible for closing it.
"""

from enum import Enum
from typing import Optional

import redis
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from .strategies import StoreStrategy, RedisStore, SQLStore, InMemoryStore
from shorturl_app.config import Settings, settings
from shorturl_app.database.connection import (
    create_db_engine,
    create_session_factory,
    init_db,
)
from shorturl_app.logging_config import get_logger
from shorturl_app.services.exceptions import (
    InvalidConnectionString,
    MissingConnectionString,
    PersistenceFailure,
)

logger = get_logger(__name__)


class StoreBackend(Enum):
    """Available store backends"""
    REDIS = "redis"
    SQL = "sql"
    MEMORY = "memory"


class StoreFactory:
    """
    Simple factory for creating store instances.

    Backend tuning (timeouts, key prefix) comes from the Settings passed in.
    """

    @classmethod
    def build(
        cls,
        backend: StoreBackend,
        connection_string: Optional[str] = None,
        config: Settings = settings,
    ) -> StoreStrategy:
        """
        Create a new store instance.

        Args:
            backend: Type of store backend (from enum)
            connection_string: Redis URL or SQLAlchemy database URL
            config: Settings holding the Redis key prefix and timeouts

        Raises:
            MissingConnectionString: If a networked backend has no target
            InvalidConnectionString: If the target cannot be parsed
            PersistenceFailure: If the SQL schema cannot be created
        """
        if backend == StoreBackend.MEMORY:
            logger.info("In-memory store initialized")
            return InMemoryStore()

        if not connection_string:
            raise MissingConnectionString(
                f"Missing connection string for '{backend.value}' store. "
                "Pass one explicitly or set URL_SHORTENER_CONNECTION_STRING."
            )

        if backend == StoreBackend.REDIS:
            try:
                redis_client = redis.from_url(
                    connection_string,
                    decode_responses=True,
                    socket_connect_timeout=config.redis_socket_timeout,
                    socket_timeout=config.redis_socket_timeout,
                )
            except ValueError as e:
                raise InvalidConnectionString(
                    f"Invalid connection string for 'redis' store: {e}"
                ) from e
            logger.info("Redis store initialized")
            return RedisStore(redis_client, key_prefix=config.redis_key_prefix)

        if backend == StoreBackend.SQL:
            try:
                engine = create_db_engine(connection_string)
            except (ArgumentError, ValueError) as e:
                raise InvalidConnectionString(
                    f"Invalid connection string for 'sql' store: {e}"
                ) from e
            try:
                init_db(engine)
            except SQLAlchemyError as e:
                engine.dispose()
                raise PersistenceFailure(f"Failed to initialize SQL store: {e}") from e
            logger.info("SQL store initialized")
            return SQLStore(create_session_factory(engine), engine=engine)

        raise ValueError(f"Unknown store backend: {backend}")
