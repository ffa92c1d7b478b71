"""redis_map — a Python mapping whose entries live in a Redis server.

Each :class:`RedisMap` owns one key prefix, so several logical maps can
share a single store without colliding.  There is no client-side cache:
every operation is a live round trip through a pooled connection.
"""

from redis_map.config import RedisMapConfig
from redis_map.exceptions import InvalidArgumentError, RedisMapError
from redis_map.mapping import RedisMap

__all__ = [
    "InvalidArgumentError",
    "RedisMap",
    "RedisMapConfig",
    "RedisMapError",
]
