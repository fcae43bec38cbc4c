"""Chain an already built configuration into another root.

Purpose
-------
Reuse a configuration (root or section) as one layer of a new root. The
provider owns no key store; every call is forwarded to the wrapped
configuration, including its reload token.
"""

from __future__ import annotations

from typing import Any, Sequence

from ..application.ports import ChangeToken, Configuration
from ..domain.data import MISSING, MissingType
from ..domain.path import sort_key
from ..observability import log_debug


class ChainedConfigurationSource:
    """Describe a configuration to chain and whether the new root owns it."""

    def __init__(self, configuration: Configuration, *, dispose_configuration: bool = False) -> None:
        self._configuration = configuration
        self._dispose_configuration = dispose_configuration

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    @property
    def dispose_configuration(self) -> bool:
        return self._dispose_configuration

    async def build(self, builder: Any) -> ChainedConfigurationProvider:
        return ChainedConfigurationProvider(self)


class ChainedConfigurationProvider:
    """Proxy provider over a chained configuration.

    Why
    ----
    Composing roots lets libraries hand out a pre-built configuration that
    applications extend with their own layers.

    What
    ----
    A ``None`` value from the wrapped configuration means "absent everywhere",
    so :meth:`get` reports ``MISSING`` and lets lower layers answer.
    """

    def __init__(self, source: ChainedConfigurationSource) -> None:
        self._source = source
        self._configuration = source.configuration

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    def get(self, key: str) -> str | None | MissingType:
        value = self._configuration.get(key)
        return MISSING if value is None else value

    def set(self, key: str, value: str | None) -> None:
        self._configuration.set(key, value)

    def get_child_keys(self, earlier_keys: Sequence[str], parent_path: str | None = None) -> list[str]:
        section = self._configuration if parent_path is None else self._configuration.get_section(parent_path)
        keys = list(earlier_keys)
        seen = {key.lower() for key in keys}
        for child in section.get_children():
            if child.key.lower() not in seen:
                seen.add(child.key.lower())
                keys.append(child.key)
        return sorted(keys, key=sort_key)

    async def load(self) -> None:
        """Nothing to load: the chained configuration manages its own data."""

    def get_reload_token(self) -> ChangeToken:
        return self._configuration.get_reload_token()

    def close(self) -> None:
        if not self._source.dispose_configuration:
            return
        close = getattr(self._configuration, "close", None)
        if close is not None:
            log_debug("chained_configuration_disposed", provider="chained", path=None)
            close()
