"""Configuration section: a path-scoped view over a root.

Purpose
-------
Give tree-shaped access to a flat configuration without copying data. A
section is just ``(root, path)``; every read, write, and child query is
forwarded to the root with the section path prepended.

System Role
-----------
Returned by ``ConfigurationRoot.get_section`` / ``get_children`` and by nested
calls on sections themselves. Sections are created on demand and compare
structurally, so two lookups of the same path are equal but not identical.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

from ..domain.path import combine, get_section_key
from ..domain.tokens import ConfigurationReloadToken
from .iteration import iterate_descendants

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .root import ConfigurationRoot


class ConfigurationSection:
    """View of the configuration subtree rooted at :attr:`path`.

    Examples
    --------
    >>> from lib_config_tree.application.provider import ConfigurationProvider
    >>> from lib_config_tree.application.root import ConfigurationRoot
    >>> provider = ConfigurationProvider()
    >>> provider.set("Data:DB1:Connection", "conn-1")
    >>> section = ConfigurationRoot([provider]).get_section("Data")
    >>> section.key, section.get("db1:connection"), section.value is None, section.exists()
    ('Data', 'conn-1', True, True)
    """

    __slots__ = ("_root", "_path")

    def __init__(self, root: ConfigurationRoot, path: str) -> None:
        self._root = root
        self._path = path

    @property
    def root(self) -> ConfigurationRoot:
        return self._root

    @property
    def path(self) -> str:
        """Full path of this section within the root."""

        return self._path

    @property
    def key(self) -> str:
        """Key this section occupies in its parent (the last path segment)."""

        return get_section_key(self._path)

    @property
    def value(self) -> str | None:
        return self._root.get(self._path)

    @value.setter
    def value(self, value: str | None) -> None:
        self._root.set(self._path, value)

    def get(self, key: str) -> str | None:
        return self._root.get(combine(self._path, key))

    def set(self, key: str, value: str | None) -> None:
        self._root.set(combine(self._path, key), value)

    def get_section(self, key: str) -> ConfigurationSection:
        return self._root.get_section(combine(self._path, key))

    def get_required_section(self, key: str) -> ConfigurationSection:
        return self._root.get_required_section(combine(self._path, key))

    def get_children(self) -> list[ConfigurationSection]:
        return self._root.get_children(self._path)

    def exists(self) -> bool:
        """Return ``True`` when the section has a value or at least one child."""

        return self.value is not None or bool(self.get_children())

    def get_reload_token(self) -> ConfigurationReloadToken:
        return self._root.get_reload_token()

    def __iter__(self) -> Iterator[tuple[str, str | None]]:
        return iterate_descendants(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigurationSection):
            return NotImplemented
        return self._root is other._root and self._path == other._path

    def __hash__(self) -> int:
        return hash((id(self._root), self._path))

    def __repr__(self) -> str:
        return f"ConfigurationSection(path={self._path!r})"
