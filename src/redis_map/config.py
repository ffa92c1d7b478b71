"""Configuration model for :class:`~redis_map.mapping.RedisMap`.

Values can be given directly, parsed from JSON with
``RedisMapConfig.model_validate_json``, or read from ``REDIS_MAP_*``
environment variables via :meth:`RedisMapConfig.from_env`.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

ENV_PREFIX = "REDIS_MAP_"


class RedisMapConfig(BaseModel):
    """Store endpoint, key namespace and connection pool settings.

    Attributes:
        host: Redis server host
        port: Redis server port
        db: Logical database index
        password: Optional AUTH password
        prefix: Namespace name; ``None`` or empty means no namespace
        separator: Appended to a non-empty prefix (``"ns"`` -> ``"ns:"``)
        max_connections: Upper bound on pooled connections
        pool_timeout: Seconds a caller waits for a free connection
                      (``None`` waits forever)
        socket_timeout: Network timeout for a single command
        socket_connect_timeout: Network timeout for establishing a connection
    """

    host: str = "localhost"
    port: int = Field(default=6379, ge=1, le=65535)
    db: int = Field(default=0, ge=0)
    password: str | None = None
    prefix: str | None = None
    separator: str = ":"
    max_connections: int = Field(default=128, ge=1)
    pool_timeout: float | None = Field(default=20.0, ge=0)
    socket_timeout: float | None = None
    socket_connect_timeout: float | None = None

    def pool_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``redis.BlockingConnectionPool``."""
        return {
            "db": self.db,
            "password": self.password,
            "max_connections": self.max_connections,
            "timeout": self.pool_timeout,
            "socket_timeout": self.socket_timeout,
            "socket_connect_timeout": self.socket_connect_timeout,
        }

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RedisMapConfig:
        """Build a config from ``REDIS_MAP_<FIELD>`` variables.

        Unset variables keep their defaults.  Raises
        ``pydantic.ValidationError`` for values that do not parse.
        """
        env = os.environ if environ is None else environ
        values = {
            name: env[ENV_PREFIX + name.upper()]
            for name in cls.model_fields
            if ENV_PREFIX + name.upper() in env
        }
        return cls.model_validate(values)
