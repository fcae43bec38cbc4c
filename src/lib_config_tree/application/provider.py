"""Base provider owning one case-insensitive key store.

Purpose
-------
Implement the behaviour every key-store-backed provider shares: point lookups,
writes, child-key discovery, and reload-token rotation. Concrete providers
(memory, environment, files) only override :meth:`ConfigurationProvider.load`.

System Role
-----------
Instances are produced by sources during ``ConfigurationBuilder.build`` and
composed, never merged, by :class:`lib_config_tree.application.root.ConfigurationRoot`.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from ..domain.data import ConfigurationData, MissingType
from ..domain.path import KEY_DELIMITER, sort_key
from ..domain.tokens import ConfigurationReloadToken


class ConfigurationProvider:
    """Key-store backed provider with a rotating reload token.

    Why
    ----
    Keeping the lookup and child-key rules in one class guarantees every
    provider answers the root the same way.

    What
    ----
    ``get`` returns ``MISSING`` for absent keys so the root can fall through to
    lower-precedence providers, while a stored ``None`` means "present without
    a scalar value". Subclasses call :meth:`_on_reload` after replacing their
    data to fire the current token and start a new generation.
    """

    def __init__(self) -> None:
        self._data = ConfigurationData()
        self._reload_token = ConfigurationReloadToken()

    @property
    def data(self) -> ConfigurationData:
        return self._data

    def get(self, key: str) -> str | None | MissingType:
        return self._data.get(key)

    def set(self, key: str, value: str | None) -> None:
        self._data[key] = value

    def get_child_keys(self, earlier_keys: Sequence[str], parent_path: str | None = None) -> list[str]:
        """Return the sorted union of *earlier_keys* and this provider's children of *parent_path*.

        Why
        ----
        The root folds this method across providers so every provider sees the
        keys discovered by the ones before it and duplicates collapse.

        What
        ----
        Without *parent_path* the first segment of every key is a child. With a
        parent, a key qualifies only when it is longer than the parent, starts
        with it (ignoring case), and the next character is the delimiter, so
        ``ParentExtra:Child`` never counts as a child of ``Parent``. Keys are
        de-duplicated case-insensitively (first spelling wins) and sorted with
        :func:`lib_config_tree.domain.path.compare`.

        Examples
        --------
        >>> provider = ConfigurationProvider()
        >>> for key in ("Data:DB1:Connection", "Data:db1:Timeout", "Data:2", "DataSource:X"):
        ...     provider.set(key, "v")
        >>> provider.get_child_keys([], "Data")
        ['2', 'DB1']
        >>> provider.get_child_keys(["Other"])
        ['Data', 'DataSource', 'Other']
        """

        keys = list(earlier_keys)
        if parent_path is None:
            keys.extend(_segment(key, 0) for key in self._data)
        else:
            keys.extend(_segment(key, len(parent_path) + 1) for key in self._data if _is_child(key, parent_path))
        return sorted(_unique_case_insensitive(keys), key=sort_key)

    async def load(self) -> None:
        """Populate the key store; the base provider has nothing to load."""

    def get_reload_token(self) -> ConfigurationReloadToken | None:
        return self._reload_token

    def _on_reload(self) -> None:
        """Swap in a fresh token, then fire the previous one."""

        previous, self._reload_token = self._reload_token, ConfigurationReloadToken()
        previous.on_reload()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(keys={len(self._data)})"


def _is_child(key: str, parent_path: str) -> bool:
    return (
        len(key) > len(parent_path)
        and key.lower().startswith(parent_path.lower())
        and key[len(parent_path)] == KEY_DELIMITER
    )


def _segment(key: str, start: int) -> str:
    end = key.find(KEY_DELIMITER, start)
    return key[start:] if end < 0 else key[start:end]


def _unique_case_insensitive(keys: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for key in keys:
        folded = key.lower()
        if folded in seen:
            continue
        seen.add(folded)
        result.append(key)
    return result
