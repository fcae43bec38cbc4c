"""Environment variable adapter.

Purpose
-------
Translate environment variables into configuration keys. Variable names use a
configurable delimiter (``__`` by default) in place of the ``:`` path
separator, because most shells reject ``:`` in names.

Key behaviours
--------------
* Names without the delimiter are ignored entirely.
* The first occurrence of the delimiter becomes ``:`` (``DB__HOST`` ->
  ``DB:HOST``).
* An optional prefix filters variables and is stripped before splitting.
* The environment is an injectable mapping; :data:`os.environ` is only the
  default, read when the provider loads.
* Emits structured logging via :mod:`lib_config_tree.observability`.
"""

from __future__ import annotations

import os
from typing import Any, Mapping

from ...application.provider import ConfigurationProvider
from ...domain.path import KEY_DELIMITER
from ...observability import log_debug, make_event

DEFAULT_ENV_DELIMITER = "__"


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('lib-config-tree')
    'LIB_CONFIG_TREE_'
    """

    return slug.replace("-", "_").upper() + "_"


class EnvironmentSource:
    """Describe which environment variables become configuration keys.

    Parameters
    ----------
    delimiter:
        Replacement for ``:`` in variable names. Defaults to ``__``.
    prefix:
        Only variables starting with this prefix are read; the prefix is
        removed from the key. Matching is case-insensitive.
    environ:
        Mapping to read from. Defaults to :data:`os.environ`.
    """

    def __init__(
        self,
        *,
        delimiter: str | None = None,
        prefix: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._delimiter = delimiter or DEFAULT_ENV_DELIMITER
        self._prefix = prefix or ""
        self._environ = environ

    @property
    def delimiter(self) -> str:
        return self._delimiter

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def environment_variables(self) -> Mapping[str, str]:
        return self._environ if self._environ is not None else os.environ

    async def build(self, builder: Any) -> EnvironmentProvider:
        provider = EnvironmentProvider(self)
        await provider.load()
        return provider


class EnvironmentProvider(ConfigurationProvider):
    """Load environment variables that carry the configured delimiter."""

    def __init__(self, source: EnvironmentSource) -> None:
        super().__init__()
        self._source = source

    @property
    def source(self) -> EnvironmentSource:
        return self._source

    async def load(self) -> None:
        """Copy matching variables from a snapshot of the environment.

        Examples
        --------
        >>> import asyncio
        >>> env = {'DEMO_SERVICE__TIMEOUT': '5', 'DEMO_FLAG': '1', 'PATH': '/bin'}
        >>> provider = EnvironmentProvider(EnvironmentSource(prefix='DEMO_', environ=env))
        >>> asyncio.run(provider.load())
        >>> list(provider.data.items())
        [('SERVICE:TIMEOUT', '5')]
        """

        snapshot = dict(self._source.environment_variables)
        for name, value in snapshot.items():
            key = env_key_to_path(name, self._source.delimiter, self._source.prefix)
            if key is not None:
                self.set(key, value)
        log_debug("provider_loaded", **make_event("env", None, {"keys": len(self._data)}))


def env_key_to_path(name: str, delimiter: str, prefix: str = "") -> str | None:
    """Return the configuration path for variable *name* or ``None`` when it does not apply.

    Examples
    --------
    >>> env_key_to_path('mongodb__connectionString', '__')
    'mongodb:connectionString'
    >>> env_key_to_path('a__b__c', '__')
    'a:b__c'
    >>> env_key_to_path('HOME', '__') is None
    True
    """

    if prefix:
        if not name.upper().startswith(prefix.upper()):
            return None
        name = name[len(prefix) :]
    if delimiter not in name:
        return None
    return name.replace(delimiter, KEY_DELIMITER, 1)
