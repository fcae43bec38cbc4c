"""Application-layer ports describing the configuration contracts.

Purpose
-------
Define the structural contracts that sources, providers, and configuration
views satisfy so the root and builder can compose them without depending on
concrete adapters.

Contents
--------
* :class:`ChangeToken` – one-shot change signal.
* :class:`Provider` – owns one source's loaded data.
* :class:`Source` – builds exactly one provider.
* :class:`Builder` – what a source may see of the builder.
* :class:`Configuration` – read/write tree view shared by roots and sections.

System Role
-----------
These protocols keep the dependency rule intact: adapters implement them, the
application layer only ever talks to the abstractions.
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, Protocol, Sequence, runtime_checkable

from ..domain.data import MissingType


@runtime_checkable
class ChangeToken(Protocol):
    """Signal that the data a consumer observed has been replaced."""

    @property
    def has_changed(self) -> bool:
        """``True`` once the token fired."""

    @property
    def active_change_callbacks(self) -> bool:
        """``True`` when callbacks are raised proactively (no polling needed)."""

    def register_change_callback(self, callback: Callable[[Any], None], state: Any = None) -> Any:
        """Register *callback*; return a handle exposing ``dispose()``."""


@runtime_checkable
class Provider(Protocol):
    """Hold one source's flat key/value data.

    Methods
    -------
    :meth:`get`
        ``MISSING`` tells the root to defer to a lower-precedence provider.
    :meth:`get_child_keys`
        Merge this provider's immediate children into *earlier_keys*.
    :meth:`load`
        (Re)populate the data from the backing source.
    """

    def get(self, key: str) -> str | None | MissingType:
        """Return the value stored for *key* or ``MISSING``."""

    def set(self, key: str, value: str | None) -> None:
        """Store *value* under *key*."""

    def get_child_keys(self, earlier_keys: Sequence[str], parent_path: str | None = None) -> list[str]:
        """Return the sorted, de-duplicated union of *earlier_keys* and own children."""

    async def load(self) -> None:
        """Load data from the backing source."""

    def get_reload_token(self) -> ChangeToken | None:
        """Return the current token, or ``None`` if the data never changes."""


@runtime_checkable
class Builder(Protocol):
    """The parts of the builder a source may inspect while building."""

    @property
    def properties(self) -> dict[str, Any]:
        """Shared key/value bag between builder and sources."""

    @property
    def sources(self) -> list[Any]:
        """Registered sources in precedence order."""


@runtime_checkable
class Source(Protocol):
    """Describe where configuration comes from and build the matching provider."""

    async def build(self, builder: Builder) -> Provider:
        """Create (and load) exactly one provider."""


@runtime_checkable
class Configuration(Protocol):
    """Tree-shaped read/write access shared by roots and sections."""

    def get(self, key: str) -> str | None:
        """Return the value for *key* relative to this node, ``None`` when absent."""

    def set(self, key: str, value: str | None) -> None:
        """Write *value* for *key* relative to this node."""

    def get_section(self, key: str) -> Any:
        """Return the (possibly empty) section for *key*."""

    def get_required_section(self, key: str) -> Any:
        """Return the section for *key* or raise ``SectionNotFound``."""

    def get_children(self) -> list[Any]:
        """Return the immediate child sections."""

    def get_reload_token(self) -> ChangeToken:
        """Return the current change token."""

    def __iter__(self) -> Iterator[tuple[str, str | None]]:
        """Walk every descendant as ``(path, value)`` pairs."""
