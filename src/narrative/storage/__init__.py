"""Storage layer: PostgreSQL (asyncpg), Redis."""

from narrative.storage.database import Database, close_database, get_database, init_database
from narrative.storage.redis import close_redis, get_redis, init_redis

__all__ = [
    "Database",
    "close_database",
    "close_redis",
    "get_database",
    "get_redis",
    "init_database",
    "init_redis",
]
