"""Case-insensitive key store owned by every configuration provider.

Purpose
-------
Hold a provider's flat ``path -> value`` data with case-insensitive lookups
while remembering the casing callers used, so iteration shows keys the way
they were written.

Contents
--------
* :data:`MISSING` – sentinel returned when a key is absent. It differs from a
  stored ``None`` which means "present, without a scalar value".
* :class:`ConfigurationData` – ordered ``MutableMapping`` with case-insensitive
  keys.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from enum import Enum
from typing import Final, Literal, Union


class _Missing(Enum):
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing.MISSING
"""Marker for "this provider has no opinion about the key"."""

MissingType = Literal[_Missing.MISSING]
Value = Union[str, None]


class ConfigurationData(MutableMapping[str, Value]):
    """Ordered mapping from configuration path to an optional string value.

    Why
    ----
    Configuration keys are case-insensitive (``Db:Host`` and ``db:host`` are
    the same entry) but users expect to see their own spelling when listing
    keys.

    What
    ----
    Entries are indexed by the lower-cased key. Writing an existing key with a
    different casing replaces the value and makes the new spelling canonical,
    keeping the entry at its original position. Only one canonical spelling
    exists per key at any time.

    Examples
    --------
    >>> data = ConfigurationData()
    >>> data["Db:Host"] = "localhost"
    >>> data["DB:HOST"]
    'localhost'
    >>> data["db:host"] = "remote"
    >>> list(data.items())
    [('db:host', 'remote')]
    >>> data.get("missing") is MISSING
    True
    """

    def __init__(self, initial: Mapping[str, Value] | None = None) -> None:
        self._entries: dict[str, tuple[str, Value]] = {}
        if initial:
            self.update(initial)

    def __getitem__(self, key: str) -> Value:
        return self._entries[key.lower()][1]

    def __setitem__(self, key: str, value: Value) -> None:
        self._entries[key.lower()] = (key, value)

    def __delitem__(self, key: str) -> None:
        del self._entries[key.lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._entries

    def __iter__(self) -> Iterator[str]:
        return (cased for cased, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ConfigurationData({dict(self.items())!r})"

    def get(self, key: str, default: Value | MissingType = MISSING) -> Value | MissingType:  # type: ignore[override]
        """Return the stored value for *key*, or *default* (:data:`MISSING`) when absent."""

        entry = self._entries.get(key.lower())
        return default if entry is None else entry[1]

    def clear(self) -> None:
        self._entries.clear()
