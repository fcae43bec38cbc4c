"""Composition root for ``lib_config_tree``.

Purpose
-------
Provide the single entry point that collects configuration sources, builds
their providers, and composes them into a :class:`ConfigurationRoot`. Adapters
(memory, environment, chained, files) are wired here and nowhere else.

Contents
--------
* :data:`_FILE_SOURCES` – mapping of file suffixes to source classes.
* :class:`ConfigurationBuilder` – fluent registration of sources plus the
  asynchronous :meth:`ConfigurationBuilder.build`.
* :func:`build_configuration` – one-call helper used by the CLI.

System Role
-----------
This module connects adapters with the application layer while emitting
structured observability signals. Source order equals precedence: sources
added later override earlier ones key by key.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any, Iterable, Mapping

from .adapters.chained import ChainedConfigurationSource
from .adapters.dotenv.default import DotEnvConfigurationSource
from .adapters.env.default import EnvironmentSource, default_env_prefix
from .adapters.file_loaders.structured import (
    FileConfigurationSource,
    JsonConfigurationSource,
    ObserverFactory,
    TomlConfigurationSource,
    YamlConfigurationSource,
)
from .adapters.memory import MemoryConfigurationSource
from .application.ports import Configuration, Source
from .application.root import ConfigurationRoot
from .domain.errors import ConfigurationFileError
from .observability import log_debug, log_info, make_event, start_trace

# Supported file sources keyed by suffix. ``add_file`` dispatches on this
# mapping; callers needing another format register a source with ``add``.
_FILE_SOURCES: dict[str, type[FileConfigurationSource]] = {
    ".json": JsonConfigurationSource,
    ".toml": TomlConfigurationSource,
    ".yaml": YamlConfigurationSource,
    ".yml": YamlConfigurationSource,
    ".env": DotEnvConfigurationSource,
}


class ConfigurationBuilder:
    """Collect sources and turn them into a :class:`ConfigurationRoot`.

    Why
    ----
    Applications describe their layers once (defaults, files, environment)
    and get a single composed configuration back.

    What
    ----
    Every ``add_*`` method appends one source and returns the builder so calls
    chain. :meth:`build` awaits every source's ``build`` concurrently and
    keeps the providers in registration order.

    Examples
    --------
    >>> import asyncio
    >>> builder = (
    ...     ConfigurationBuilder()
    ...     .add_memory_collection({"Service:Timeout": "5", "Service:Name": "demo"})
    ...     .add_memory_collection({"service:timeout": "10"})
    ... )
    >>> root = asyncio.run(builder.build())
    >>> root.get("Service:Timeout"), root.get("Service:Name")
    ('10', 'demo')
    """

    def __init__(self) -> None:
        self._sources: list[Source] = []
        self._properties: dict[str, Any] = {}

    @property
    def sources(self) -> list[Source]:
        """Registered sources, lowest precedence first."""

        return self._sources

    @property
    def properties(self) -> dict[str, Any]:
        """Free-form values shared with every source during :meth:`build`."""

        return self._properties

    def add(self, source: Source) -> ConfigurationBuilder:
        self._sources.append(source)
        return self

    def add_memory_collection(self, initial_data: Mapping[str, str | None] | None = None) -> ConfigurationBuilder:
        return self.add(MemoryConfigurationSource(initial_data))

    def add_environment_variables(
        self,
        *,
        delimiter: str | None = None,
        prefix: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> ConfigurationBuilder:
        """Add the process environment (or *environ*) as a source.

        Pass ``prefix=default_env_prefix(slug)`` to only read variables that
        belong to one application.
        """

        return self.add(EnvironmentSource(delimiter=delimiter, prefix=prefix, environ=environ))

    def add_chained_configuration(
        self, configuration: Configuration, *, dispose_configuration: bool = False
    ) -> ConfigurationBuilder:
        return self.add(ChainedConfigurationSource(configuration, dispose_configuration=dispose_configuration))

    def add_json_file(self, path: str | os.PathLike[str], **options: Any) -> ConfigurationBuilder:
        return self.add(JsonConfigurationSource(path, **options))

    def add_toml_file(self, path: str | os.PathLike[str], **options: Any) -> ConfigurationBuilder:
        return self.add(TomlConfigurationSource(path, **options))

    def add_yaml_file(self, path: str | os.PathLike[str], **options: Any) -> ConfigurationBuilder:
        return self.add(YamlConfigurationSource(path, **options))

    def add_dotenv_file(self, path: str | os.PathLike[str], **options: Any) -> ConfigurationBuilder:
        return self.add(DotEnvConfigurationSource(path, **options))

    def add_file(
        self,
        path: str | os.PathLike[str],
        *,
        optional: bool = False,
        reload_on_change: bool = False,
        observer_factory: ObserverFactory | None = None,
    ) -> ConfigurationBuilder:
        """Add a file source chosen by the suffix of *path*.

        Raises
        ------
        ConfigurationFileError
            When the suffix is not one of ``.json``, ``.toml``, ``.yaml``,
            ``.yml`` or ``.env``.

        Examples
        --------
        >>> builder = ConfigurationBuilder().add_file("settings.toml", optional=True)
        >>> type(builder.sources[0]).__name__
        'TomlConfigurationSource'
        >>> ConfigurationBuilder().add_file("settings.ini")
        Traceback (most recent call last):
        ...
        lib_config_tree.domain.errors.ConfigurationFileError: Unsupported configuration file type: settings.ini
        """

        source_type = _source_for(path)
        return self.add(
            source_type(
                path,
                optional=optional,
                reload_on_change=reload_on_change,
                observer_factory=observer_factory,
            )
        )

    async def build(self) -> ConfigurationRoot:
        """Build every source concurrently and compose the providers.

        Side Effects
        ------------
        Binds a fresh trace id via :func:`start_trace` and emits
        ``configuration_built`` once all providers are loaded.
        """

        start_trace()
        providers = await asyncio.gather(*(source.build(self) for source in self._sources))
        for source, provider in zip(self._sources, providers):
            log_debug("source_built", source=type(source).__name__, provider=type(provider).__name__)
        root = ConfigurationRoot(providers)
        log_info("configuration_built", **make_event("root", None, {"providers": len(providers)}))
        return root


async def build_configuration(
    files: Iterable[str | os.PathLike[str]] = (),
    *,
    optional: bool = False,
    include_environment: bool = True,
    env_delimiter: str | None = None,
    env_prefix: str | None = None,
) -> ConfigurationRoot:
    """Return a root layering *files* (in order) below the environment.

    Why
    ----
    The CLI and quick scripts need the common "files then environment" stack
    without spelling out a builder.

    Examples
    --------
    >>> import asyncio
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> path = Path(tmp.name) / "app.json"
    >>> _ = path.write_text('{"service": {"name": "demo"}}', encoding="utf-8")
    >>> root = asyncio.run(build_configuration([path], include_environment=False))
    >>> root.get("service:name")
    'demo'
    >>> tmp.cleanup()
    """

    builder = ConfigurationBuilder()
    for path in files:
        builder.add_file(path, optional=optional)
    if include_environment:
        builder.add_environment_variables(delimiter=env_delimiter, prefix=env_prefix)
    return await builder.build()


def _source_for(path: str | os.PathLike[str]) -> type[FileConfigurationSource]:
    name = Path(path).name.lower()
    suffix = ".env" if name == ".env" else Path(name).suffix
    source_type = _FILE_SOURCES.get(suffix)
    if source_type is None:
        raise ConfigurationFileError(f"Unsupported configuration file type: {os.fspath(path)}", path=os.fspath(path))
    return source_type


__all__ = [
    "ConfigurationBuilder",
    "build_configuration",
    "default_env_prefix",
]
