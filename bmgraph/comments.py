# Copyright (c) 2025 Varshith Gudur. Licensed under AGPLv3.
"""
Storage for unrecognized ``# _keyword value`` lines.

Each keyword holds either a free-form set of values or, once someone
asks for it as a mapping, a key/value map parsed from ``key=value``
entries. The change from set to map is one way.
"""
import logging
from typing import Dict, Iterable, Optional, Set

from .errors import SpecialCommentError

logger = logging.getLogger(__name__)

class SpecialComment:
    def __init__(self, values: Iterable[str] = ()):
        self._values: Optional[Set[str]] = {v for v in values if v}
        self._map: Optional[Dict[str, str]] = None

    @classmethod
    def from_map(cls, entries: Dict[str, str]) -> "SpecialComment":
        comment = cls()
        comment._values = None
        comment._map = dict(entries)
        return comment

    @property
    def is_map(self) -> bool:
        return self._map is not None

    def copy(self) -> "SpecialComment":
        if self._map is not None:
            return SpecialComment.from_map(self._map)
        return SpecialComment(self._values)

    def add(self, value: str) -> Set[str]:
        """Add a value; in map form the value must be ``key=value``."""
        if value:
            if self._map is not None:
                key, sep, val = value.partition("=")
                if not sep:
                    raise SpecialCommentError(
                        f"Cannot add {value!r} to a key/value special comment")
                self._map[key] = val
            else:
                self._values.add(value)
        return self.values()

    def values(self) -> Set[str]:
        if self._map is not None:
            return {f"{k}={v}" for k, v in self._map.items()}
        return self._values

    def as_map(self, name: str = "") -> Dict[str, str]:
        """Return the key/value form, converting the free-form set first."""
        if self._map is None:
            entries: Dict[str, str] = {}
            for entry in sorted(self._values):
                key, sep, val = entry.partition("=")
                if not sep:
                    logger.warning(
                        f"Unparsable attribute-value pair {entry!r} in special comment {name!r}")
                    continue
                entries[key] = val
            self._map = entries
            self._values = None
        return self._map

    def put(self, key: str, value: str) -> None:
        self.as_map()[key] = value

    def __len__(self) -> int:
        return len(self._map) if self._map is not None else len(self._values)

    def __repr__(self) -> str:
        if self._map is not None:
            return f"SpecialComment(map={self._map!r})"
        return f"SpecialComment({sorted(self._values)!r})"
