"""Custom exceptions for the redis_map package.

Connectivity failures are not wrapped here: redis-py's own
``redis.exceptions.ConnectionError`` reaches the caller as raised.
"""

from __future__ import annotations


class RedisMapError(Exception):
    """Base exception for all redis_map errors."""


class InvalidArgumentError(RedisMapError, ValueError):
    """Raised when a mutating operation receives a missing or non-text argument."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        msg = f"Invalid argument to '{operation}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
