"""File-backed configuration sources.

Purpose
-------
Turn on-disk documents into provider data. Each format adapter only parses
bytes into a mapping; reading, flattening, optional-file handling, and
reload-on-change watching live in the shared base classes.

Contents
--------
* :class:`FileConfigurationSource` / :class:`FileConfigurationProvider` –
  shared behaviour (read, flatten onto the key store, watch with ``watchdog``).
* :class:`JsonConfigurationSource` – JSON documents.
* :class:`TomlConfigurationSource` – TOML documents (``tomllib``/``tomli``).
* :class:`YamlConfigurationSource` – YAML documents (``yaml.safe_load``).

System Role
-----------
Registered through :class:`lib_config_tree.core.ConfigurationBuilder`
(``add_json_file`` and friends, or ``add_file`` which picks by suffix).
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Mapping

try:  # Python >= 3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[no-redef]

import yaml
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from ...application.flatten import flatten
from ...application.provider import ConfigurationProvider
from ...domain.data import ConfigurationData
from ...domain.errors import ConfigurationError, ConfigurationFileError
from ...domain.path import KEY_DELIMITER
from ...observability import log_debug, log_error, make_event

ObserverFactory = Callable[[], BaseObserver]

_WATCHED_EVENTS = frozenset({"created", "modified", "deleted", "moved"})


class FileConfigurationSource(ABC):
    """Describe a configuration file and how strictly it is treated.

    Parameters
    ----------
    path:
        File location; relative paths resolve against the working directory.
    optional:
        When ``True`` a missing or malformed file leaves the provider empty
        instead of raising :class:`ConfigurationFileError`.
    reload_on_change:
        Watch the file and reload the provider (firing its reload token) when
        it is created, modified, moved, or deleted.
    observer_factory:
        Callable returning a ``watchdog`` observer; defaults to the native
        :class:`watchdog.observers.Observer`.
    """

    format_name: str = "file"

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        optional: bool = False,
        reload_on_change: bool = False,
        observer_factory: ObserverFactory | None = None,
    ) -> None:
        self._path = os.fspath(path)
        self._optional = optional
        self._reload_on_change = reload_on_change
        self._observer_factory: ObserverFactory = observer_factory or Observer

    @property
    def path(self) -> str:
        return self._path

    @property
    def optional(self) -> bool:
        return self._optional

    @property
    def reload_on_change(self) -> bool:
        return self._reload_on_change

    @property
    def observer_factory(self) -> ObserverFactory:
        return self._observer_factory

    async def build(self, builder: Any) -> FileConfigurationProvider:
        provider = self.create_provider()
        await provider.load()
        return provider

    @abstractmethod
    def create_provider(self) -> FileConfigurationProvider:
        """Return an unloaded provider for this source."""


class FileConfigurationProvider(ConfigurationProvider, ABC):
    """Load a file into the key store and optionally keep it in sync.

    Why
    ----
    All formats share the same failure policy and reload protocol; only the
    parsing step differs.

    What
    ----
    Every load parses the whole file into a fresh key store and then swaps it
    in, so keys removed from the file disappear. Watch events re-run the load
    on the event loop that performed the first :meth:`load`, or on the
    observer thread once that loop has finished, and fire the provider's
    reload token afterwards. :meth:`close` stops the watcher.
    """

    def __init__(self, source: FileConfigurationSource) -> None:
        super().__init__()
        self._source = source
        self._file_path = Path(source.path).expanduser().resolve()
        self._observer: BaseObserver | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def source(self) -> FileConfigurationSource:
        return self._source

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def watching(self) -> bool:
        return self._observer is not None

    async def load(self) -> None:
        await self._read_configuration_file()
        if self._source.reload_on_change and self._observer is None:
            self._start_watching()

    @abstractmethod
    def parse(self, payload: bytes) -> Mapping[str, Any]:
        """Parse raw file bytes into a (possibly nested) mapping."""

    async def _read_configuration_file(self) -> None:
        path = self._source.path
        try:
            payload = await asyncio.to_thread(self._read)
        except OSError as exc:
            if self._source.optional:
                log_debug("config_file_missing_optional", **make_event(self._source.format_name, path))
                self._data = ConfigurationData()
                return
            log_error("config_file_unreadable", provider=self._source.format_name, path=path, error=str(exc))
            raise ConfigurationFileError(f"Failed to read configuration file: {path}", path=path) from exc

        try:
            data = self._to_data(self.parse(payload))
        except (ConfigurationError, ValueError, TypeError) as exc:
            if self._source.optional:
                log_debug("config_file_invalid_optional", **make_event(self._source.format_name, path))
                self._data = ConfigurationData()
                return
            log_error("config_file_invalid", provider=self._source.format_name, path=path, error=str(exc))
            raise ConfigurationFileError(
                f"Failed to parse {self._source.format_name.upper()} configuration file: {path}", path=path
            ) from exc

        self._data = data
        log_debug("provider_loaded", **make_event(self._source.format_name, path, {"keys": len(data)}))

    def _read(self) -> bytes:
        payload = self._file_path.read_bytes()
        log_debug("config_file_read", provider=self._source.format_name, path=str(self._file_path), size=len(payload))
        return payload

    def _to_data(self, document: Mapping[str, Any]) -> ConfigurationData:
        if not isinstance(document, Mapping):
            raise ConfigurationFileError(f"File {self._source.path} did not produce a mapping", path=self._source.path)
        data = ConfigurationData()
        for key, value in flatten(document, delimiter=KEY_DELIMITER).items():
            data[key] = stringify(value)
        return data

    def _start_watching(self) -> None:
        self._loop = asyncio.get_running_loop()
        observer = self._source.observer_factory()
        handler = _FileChangeHandler(self._file_path, self._schedule_reload)
        try:
            observer.schedule(handler, str(self._file_path.parent), recursive=False)
            observer.start()
        except OSError as exc:
            if self._source.optional:
                log_debug("config_file_watch_skipped", provider=self._source.format_name, path=self._source.path, error=str(exc))
                return
            raise ConfigurationFileError(
                f"Failed to watch configuration file: {self._source.path}", path=self._source.path
            ) from exc
        self._observer = observer
        log_debug("config_file_watch_started", **make_event(self._source.format_name, str(self._file_path)))

    def _schedule_reload(self) -> None:
        """Hand a file event from the observer thread over to an event loop.

        Events go to the loop that ran the first :meth:`load` while it is
        running. Once that loop is gone (a root built with :func:`asyncio.run`)
        the reload runs to completion on the observer thread instead.
        """

        loop = self._loop
        if loop is None or loop.is_closed() or not loop.is_running():
            try:
                asyncio.run(self.reload_from_file())
            except Exception as exc:  # noqa: BLE001 - observer thread has no caller to raise to
                self._log_reload_failure(exc)
            return
        future = asyncio.run_coroutine_threadsafe(self.reload_from_file(), loop)
        future.add_done_callback(self._report_reload_outcome)

    def _report_reload_outcome(self, future: concurrent.futures.Future[None]) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self._log_reload_failure(exc)

    def _log_reload_failure(self, exc: BaseException) -> None:
        log_error(
            "config_file_reload_failed",
            provider=self._source.format_name,
            path=self._source.path,
            error=str(exc),
        )

    async def reload_from_file(self) -> None:
        """Re-read the file and fire the reload token.

        A failed read leaves the previous data and token untouched and is
        logged as ``config_file_reload_failed``.
        """

        log_debug("config_file_changed", **make_event(self._source.format_name, str(self._file_path)))
        try:
            await self._read_configuration_file()
            self._on_reload()
        except ConfigurationError as exc:
            self._log_reload_failure(exc)

    def close(self) -> None:
        """Stop watching the file."""

        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            observer.join()


class _FileChangeHandler(FileSystemEventHandler):
    """Forward events touching one file (watched through its directory)."""

    def __init__(self, file_path: Path, on_change: Callable[[], None]) -> None:
        super().__init__()
        self._file_path = file_path
        self._on_change = on_change

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _WATCHED_EVENTS:
            return
        candidates = (event.src_path, getattr(event, "dest_path", ""))
        if any(candidate and Path(os.fsdecode(candidate)) == self._file_path for candidate in candidates):
            self._on_change()


def stringify(value: Any) -> str | None:
    """Render a parsed scalar the way it reads in the source document.

    Examples
    --------
    >>> stringify(True), stringify(5), stringify(None), stringify("x")
    ('true', '5', None, 'x')
    """

    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class JsonConfigurationSource(FileConfigurationSource):
    """JSON file source.

    Examples
    --------
    >>> import asyncio
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> path = Path(tmp.name) / "appsettings.json"
    >>> _ = path.write_text('{"Db": {"Hosts": ["a", "b"], "Debug": true}}', encoding="utf-8")
    >>> provider = asyncio.run(JsonConfigurationSource(path).build(None))
    >>> provider.get("db:hosts:1"), provider.get("DB:DEBUG")
    ('b', 'true')
    >>> tmp.cleanup()
    """

    format_name = "json"

    def create_provider(self) -> JsonConfigurationProvider:
        return JsonConfigurationProvider(self)


class JsonConfigurationProvider(FileConfigurationProvider):
    def parse(self, payload: bytes) -> Mapping[str, Any]:
        return json.loads(payload)


class TomlConfigurationSource(FileConfigurationSource):
    """TOML file source."""

    format_name = "toml"

    def create_provider(self) -> TomlConfigurationProvider:
        return TomlConfigurationProvider(self)


class TomlConfigurationProvider(FileConfigurationProvider):
    def parse(self, payload: bytes) -> Mapping[str, Any]:
        return tomllib.loads(payload.decode("utf-8"))


class YamlConfigurationSource(FileConfigurationSource):
    """YAML file source; an empty document yields no keys."""

    format_name = "yaml"

    def create_provider(self) -> YamlConfigurationProvider:
        return YamlConfigurationProvider(self)


class YamlConfigurationProvider(FileConfigurationProvider):
    def parse(self, payload: bytes) -> Mapping[str, Any]:
        try:
            document = yaml.safe_load(payload)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML: {exc}") from exc
        return {} if document is None else document
