"""Key namespacing: every logical key lives under one fixed prefix."""

from __future__ import annotations

import re
from dataclasses import dataclass

# Redis glob metacharacters that must be matched literally inside a prefix.
_GLOB_SPECIALS = re.compile(r"([\\*?\[\]])")


def escape_glob(text: str) -> str:
    """Backslash-escape glob metacharacters so *text* matches only itself."""
    return _GLOB_SPECIALS.sub(r"\\\1", text)


@dataclass(frozen=True)
class KeyNamespace:
    """Normalized key prefix shared by all operations of one map.

    Attributes:
        prefix: Text prepended to every logical key, separator included.
                Empty when the map is not namespaced.
    """

    prefix: str = ""

    @classmethod
    def from_name(cls, name: str | None, separator: str = ":") -> KeyNamespace:
        if not name:
            return cls("")
        return cls(f"{name}{separator}")

    def qualify(self, key: str) -> str:
        return self.prefix + key

    def strip(self, full_key: str) -> str:
        if not full_key.startswith(self.prefix):
            raise ValueError(f"Key {full_key!r} is outside namespace {self.prefix!r}")
        return full_key[len(self.prefix) :]

    @property
    def pattern(self) -> str:
        """SCAN/KEYS match pattern covering exactly this namespace."""
        return escape_glob(self.prefix) + "*"
