"""In-memory configuration source.

Purpose
-------
Feed a fixed ``path -> value`` mapping into the tree, typically for defaults
or tests.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..application.provider import ConfigurationProvider
from ..observability import log_debug, make_event


class MemoryConfigurationSource:
    """Wrap *initial_data* and build a provider that loads it verbatim.

    Examples
    --------
    >>> import asyncio
    >>> provider = asyncio.run(MemoryConfigurationSource({"Mem:Key": "value"}).build(None))
    >>> provider.get("mem:key")
    'value'
    """

    def __init__(self, initial_data: Mapping[str, str | None] | None = None) -> None:
        self._initial_data: Mapping[str, str | None] = initial_data if initial_data is not None else {}

    @property
    def initial_data(self) -> Mapping[str, str | None]:
        return self._initial_data

    async def build(self, builder: Any) -> MemoryConfigurationProvider:
        provider = MemoryConfigurationProvider(self)
        await provider.load()
        return provider


class MemoryConfigurationProvider(ConfigurationProvider):
    """Provider whose data is copied from a :class:`MemoryConfigurationSource`."""

    def __init__(self, source: MemoryConfigurationSource) -> None:
        super().__init__()
        self._source = source

    @property
    def source(self) -> MemoryConfigurationSource:
        return self._source

    async def load(self) -> None:
        for key, value in self._source.initial_data.items():
            self.set(key, value)
        log_debug("provider_loaded", **make_event("memory", None, {"keys": len(self._data)}))
