"""Configuration root composing an ordered list of providers.

Purpose
-------
Answer reads and writes across every provider with "last provider wins"
precedence, expose the result as sections, and republish provider reloads as
one root-level change token.

Contents
--------
* :class:`ConfigurationRoot` – the composed configuration.

System Role
-----------
Built by :class:`lib_config_tree.core.ConfigurationBuilder` from fully loaded
providers. Providers are never merged into one store; composition happens
here at query time.
"""

from __future__ import annotations

from functools import reduce
from typing import Iterator, Sequence

from ..domain.data import MISSING
from ..domain.errors import ConfigurationAggregateError, ProviderRegistryEmpty, SectionNotFound
from ..domain.path import combine
from ..domain.tokens import ChangeTokenRegistration, ConfigurationReloadToken, on_change
from ..observability import log_debug, log_error, log_info, start_trace
from .iteration import iterate_descendants
from .ports import Provider
from .section import ConfigurationSection


class ConfigurationRoot:
    """Layered configuration over an ordered provider list.

    Why
    ----
    Applications combine defaults, files, and environment overrides; the root
    keeps each layer separate and resolves precedence per key.

    What
    ----
    Providers are ordered from lowest to highest precedence. The root
    subscribes to every provider's reload token at construction and replaces
    its own token whenever a provider reloads or :meth:`reload` completes.
    :meth:`close` (or leaving a ``with`` block) unsubscribes and closes every
    provider that supports it.

    Examples
    --------
    >>> from lib_config_tree.application.provider import ConfigurationProvider
    >>> low, high = ConfigurationProvider(), ConfigurationProvider()
    >>> low.set("Service:Timeout", "5")
    >>> high.set("service:timeout", "10")
    >>> root = ConfigurationRoot([low, high])
    >>> root.get("SERVICE:TIMEOUT")
    '10'
    >>> root.get("service:retries") is None
    True
    """

    def __init__(self, providers: Sequence[Provider]) -> None:
        self._providers: list[Provider] = list(providers)
        self._reload_token = ConfigurationReloadToken()
        self._registrations: list[ChangeTokenRegistration] = [
            on_change(provider.get_reload_token, self._raise_changed) for provider in self._providers
        ]

    @property
    def providers(self) -> list[Provider]:
        return self._providers

    def get(self, key: str) -> str | None:
        """Return the value from the highest-precedence provider that knows *key*."""

        for provider in reversed(self._providers):
            value = provider.get(key)
            if value is not MISSING:
                return value
        return None

    def set(self, key: str, value: str | None) -> None:
        """Write *value* to every provider.

        Writes are not transactional: when a provider fails, the providers
        before it keep the new value.
        """

        if not self._providers:
            raise ProviderRegistryEmpty()
        for provider in self._providers:
            provider.set(key, value)

    def get_section(self, key: str) -> ConfigurationSection:
        """Return the section at *key*; it may be empty, check :meth:`ConfigurationSection.exists`."""

        return ConfigurationSection(self, key)

    def get_required_section(self, key: str) -> ConfigurationSection:
        section = self.get_section(key)
        if not section.exists():
            raise SectionNotFound(key)
        return section

    def get_children(self, path: str | None = None) -> list[ConfigurationSection]:
        """Return the immediate child sections of *path* (top level when ``None``)."""

        keys: list[str] = reduce(
            lambda seed, provider: provider.get_child_keys(seed, path),
            self._providers,
            [],
        )
        return [self.get_section(key if path is None else combine(path, key)) for key in keys]

    async def reload(self) -> None:
        """Reload every provider in order, then fire the root token once."""

        start_trace()
        for provider in self._providers:
            await provider.load()
        log_info("configuration_reloaded", provider="root", path=None, providers=len(self._providers))
        self._raise_changed()

    def get_reload_token(self) -> ConfigurationReloadToken:
        return self._reload_token

    def _raise_changed(self) -> None:
        previous, self._reload_token = self._reload_token, ConfigurationReloadToken()
        log_debug("configuration_changed", provider="root", path=None)
        previous.on_reload()

    def close(self) -> None:
        """Unsubscribe from provider tokens and close every closable provider.

        Every step is attempted; failures are raised afterwards as one
        :class:`ConfigurationAggregateError`.
        """

        errors: list[BaseException] = []
        for registration in self._registrations:
            registration.dispose()
        self._registrations.clear()

        for provider in self._providers:
            close = getattr(provider, "close", None)
            if close is None:
                continue
            try:
                close()
            except Exception as exc:  # noqa: BLE001 - collected and re-raised below
                log_error("provider_dispose_failed", provider=type(provider).__name__, path=None, error=str(exc))
                errors.append(exc)

        log_debug("configuration_disposed", provider="root", path=None, failures=len(errors))
        if errors:
            raise ConfigurationAggregateError("Failed to dispose one or more configuration providers.", errors)

    def __enter__(self) -> ConfigurationRoot:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __iter__(self) -> Iterator[tuple[str, str | None]]:
        return iterate_descendants(self)

    def __repr__(self) -> str:
        return f"ConfigurationRoot(providers={len(self._providers)})"
