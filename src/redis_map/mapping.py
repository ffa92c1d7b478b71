"""RedisMap — a ``MutableMapping[str, str]`` whose entries live in Redis."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from contextlib import contextmanager
from types import TracebackType
from typing import Any

import redis

from redis_map._internal.keys import KeyNamespace
from redis_map.config import RedisMapConfig
from redis_map.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONNECTIONS = 128
SCAN_COUNT = 500

_MISSING: Any = object()


def _require_text(operation: str, key: object, value: object) -> None:
    if key is None or value is None:
        raise InvalidArgumentError(operation, "key or value cannot be None")
    if not isinstance(key, str) or not isinstance(value, str):
        raise InvalidArgumentError(
            operation,
            f"key and value must be str, got {type(key).__name__} and {type(value).__name__}",
        )


class RedisMap(MutableMapping[str, str]):
    """Dict-like view of every Redis key under one prefix.

    Nothing is cached client-side: each call is a live round trip, so two
    instances sharing a prefix see each other's writes immediately.  Every
    operation borrows one connection from the pool for its whole command
    sequence and hands it back on every exit path.  Sequences are not
    atomic; ``put`` and ``remove`` read the old value and then write, so
    concurrent callers on the same key may see stale "previous" values.

    Lookups with non-``str`` keys or values are misses, never errors.
    ``put``/``put_all`` reject ``None`` and non-``str`` arguments with
    :class:`~redis_map.exceptions.InvalidArgumentError` before touching the
    store.  Connectivity failures surface as redis-py's own
    ``redis.exceptions.ConnectionError``.

    Parameters:
        host:            Redis server host.
        port:            Redis server port.
        prefix:          Namespace name.  ``None`` or ``""`` means no
                         namespace; otherwise *separator* is appended.
        separator:       Joins the prefix and the logical key.
        connection_pool: Pre-built pool to borrow instead of creating one.
                         The map does not close a pool it did not create.
                         It must decode responses to ``str``.
        owns_pool:       Whether ``close()`` disconnects the pool.  Defaults
                         to ``True`` only when the map builds its own pool.
        pool_kwargs:     Extra ``redis.BlockingConnectionPool`` arguments
                         (``max_connections``, ``timeout``, ``db``, ...).
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        prefix: str | None = None,
        *,
        separator: str = ":",
        connection_pool: redis.ConnectionPool | None = None,
        owns_pool: bool | None = None,
        **pool_kwargs: Any,
    ) -> None:
        self._namespace = KeyNamespace.from_name(prefix, separator)
        self._owns_pool = connection_pool is None if owns_pool is None else owns_pool
        if connection_pool is None:
            pool_kwargs.setdefault("max_connections", DEFAULT_MAX_CONNECTIONS)
            connection_pool = redis.BlockingConnectionPool(
                host=host,
                port=port,
                decode_responses=True,
                **pool_kwargs,
            )
        self._pool = connection_pool
        self._host = connection_pool.connection_kwargs.get("host", host)
        self._port = connection_pool.connection_kwargs.get("port", port)
        if self._owns_pool:
            logger.info(
                "Created connection pool for %s:%s (max_connections=%s)",
                self._host,
                self._port,
                getattr(connection_pool, "max_connections", None),
            )

    @classmethod
    def from_config(cls, config: RedisMapConfig) -> RedisMap:
        return cls(
            config.host,
            config.port,
            config.prefix,
            separator=config.separator,
            **config.pool_kwargs(),
        )

    @classmethod
    def from_url(
        cls,
        url: str,
        prefix: str | None = None,
        *,
        separator: str = ":",
        **pool_kwargs: Any,
    ) -> RedisMap:
        """Build a map from a ``redis://`` URL; the map owns the resulting pool."""
        pool_kwargs.setdefault("max_connections", DEFAULT_MAX_CONNECTIONS)
        pool = redis.BlockingConnectionPool.from_url(url, decode_responses=True, **pool_kwargs)
        return cls(prefix=prefix, separator=separator, connection_pool=pool, owns_pool=True)

    # ── lifecycle ────────────────────────────────────────────

    @property
    def prefix(self) -> str:
        """The effective key prefix, separator included."""
        return self._namespace.prefix

    @property
    def connection_pool(self) -> redis.ConnectionPool:
        return self._pool

    def close(self) -> None:
        """Disconnect the pool if this map created it."""
        if self._owns_pool:
            self._pool.disconnect()
            logger.info("Closed connection pool for %s:%s", self._host, self._port)

    def __enter__(self) -> RedisMap:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(host={self._host!r}, port={self._port!r}, "
            f"prefix={self.prefix!r})"
        )

    # ── connection scope ─────────────────────────────────────

    @contextmanager
    def _connection(self) -> Iterator[redis.Redis]:
        conn = redis.Redis(connection_pool=self._pool, single_connection_client=True)
        try:
            yield conn
        finally:
            conn.close()

    def _scan_keys(self, conn: redis.Redis) -> set[str]:
        # SCAN may yield a key more than once.
        return set(conn.scan_iter(match=self._namespace.pattern, count=SCAN_COUNT))

    # ── queries ──────────────────────────────────────────────

    def __len__(self) -> int:
        with self._connection() as conn:
            return len(self._scan_keys(conn))

    def is_empty(self) -> bool:
        return len(self) == 0

    def contains_key(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        with self._connection() as conn:
            return bool(conn.exists(self._namespace.qualify(key)))

    def __contains__(self, key: object) -> bool:
        return self.contains_key(key)

    def contains_value(self, value: object) -> bool:
        """Scan the namespace for *value*.  Linear in the number of keys."""
        if not isinstance(value, str):
            return False
        with self._connection() as conn:
            for full_key in self._scan_keys(conn):
                if conn.get(full_key) == value:
                    return True
        return False

    def get(self, key: object, default: Any = None) -> Any:
        if not isinstance(key, str):
            return default
        with self._connection() as conn:
            value = conn.get(self._namespace.qualify(key))
        return default if value is None else value

    def __getitem__(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    # ── mutations ────────────────────────────────────────────

    def put(self, key: str, value: str) -> str | None:
        """Store *value* under *key* and return the value it replaced."""
        _require_text("put", key, value)
        full_key = self._namespace.qualify(key)
        with self._connection() as conn:
            previous = conn.get(full_key)
            conn.set(full_key, value)
        logger.debug("put %s", full_key)
        return previous

    def __setitem__(self, key: str, value: str) -> None:
        self.put(key, value)

    def remove(self, key: object) -> str | None:
        """Delete *key* and return the value it held, or ``None``."""
        if not isinstance(key, str):
            return None
        full_key = self._namespace.qualify(key)
        with self._connection() as conn:
            previous = conn.get(full_key)
            conn.delete(full_key)
        logger.debug("remove %s (present=%s)", full_key, previous is not None)
        return previous

    def __delitem__(self, key: str) -> None:
        if self.remove(key) is None:
            raise KeyError(key)

    def pop(self, key: str, default: Any = _MISSING) -> Any:
        value = self.remove(key)
        if value is None:
            if default is _MISSING:
                raise KeyError(key)
            return default
        return value

    def put_all(self, entries: Mapping[str, str] | Iterable[tuple[str, str]] | None) -> None:
        """Write every pair under the prefix.

        All pairs are validated before the first write.  A store failure
        midway leaves the earlier writes in place.
        """
        if entries is None:
            raise InvalidArgumentError("put_all", "entries cannot be None")
        pairs = list(entries.items()) if isinstance(entries, Mapping) else list(entries)
        for key, value in pairs:
            _require_text("put_all", key, value)
        with self._connection() as conn:
            for key, value in pairs:
                conn.set(self._namespace.qualify(key), value)
        logger.debug("put_all wrote %d keys under %r", len(pairs), self.prefix)

    def update(  # type: ignore[override]
        self,
        other: Mapping[str, str] | Iterable[tuple[str, str]] = (),
        /,
        **kwargs: str,
    ) -> None:
        pairs = list(other.items()) if isinstance(other, Mapping) else list(other)
        self.put_all([*pairs, *kwargs.items()])

    def clear(self) -> None:
        """Delete every key under the prefix with a single DEL."""
        with self._connection() as conn:
            keys = self._scan_keys(conn)
            if keys:
                conn.delete(*keys)
        logger.debug("clear removed %d keys under %r", len(keys), self.prefix)

    # ── snapshots ────────────────────────────────────────────

    def key_set(self) -> set[str]:
        with self._connection() as conn:
            return {self._namespace.strip(k) for k in self._scan_keys(conn)}

    def __iter__(self) -> Iterator[str]:
        return iter(self.key_set())

    def values(self) -> list[str]:  # type: ignore[override]
        """All values under the prefix; duplicates are kept."""
        result: list[str] = []
        with self._connection() as conn:
            for full_key in self._scan_keys(conn):
                value = conn.get(full_key)
                if value is not None:
                    result.append(value)
        return result

    def entry_set(self) -> set[tuple[str, str]]:
        entries: set[tuple[str, str]] = set()
        with self._connection() as conn:
            for full_key in self._scan_keys(conn):
                value = conn.get(full_key)
                if value is not None:
                    entries.add((self._namespace.strip(full_key), value))
        return entries
