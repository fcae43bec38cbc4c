"""Public package surface for ``lib_config_tree``.

Applications build a layered configuration with :class:`ConfigurationBuilder`
and read it through :class:`ConfigurationRoot` / :class:`ConfigurationSection`.
Everything exported here is considered stable; deeper modules are
implementation detail.
"""

from __future__ import annotations

from .adapters.chained import ChainedConfigurationProvider, ChainedConfigurationSource
from .adapters.dotenv.default import DotEnvConfigurationProvider, DotEnvConfigurationSource
from .adapters.env.default import EnvironmentProvider, EnvironmentSource, default_env_prefix
from .adapters.file_loaders.structured import (
    FileConfigurationProvider,
    FileConfigurationSource,
    JsonConfigurationProvider,
    JsonConfigurationSource,
    TomlConfigurationProvider,
    TomlConfigurationSource,
    YamlConfigurationProvider,
    YamlConfigurationSource,
)
from .adapters.memory import MemoryConfigurationProvider, MemoryConfigurationSource
from .adapters.schema.binding import bind_configuration
from .application.flatten import flatten, unflatten
from .application.iteration import iterate_configuration_entries
from .application.provider import ConfigurationProvider
from .application.root import ConfigurationRoot
from .application.section import ConfigurationSection
from .core import ConfigurationBuilder, build_configuration
from .domain.data import MISSING, ConfigurationData
from .domain.errors import (
    CircularReferenceError,
    ConfigurationAggregateError,
    ConfigurationError,
    ConfigurationFileError,
    ParseError,
    ParseErrors,
    ProviderRegistryEmpty,
    SectionNotFound,
)
from .domain.path import KEY_DELIMITER, combine, compare, get_parent_path, get_section_key
from .domain.tokens import ChangeTokenRegistration, ConfigurationReloadToken, on_change
from .observability import bind_trace_id, get_logger

__all__ = [
    "KEY_DELIMITER",
    "MISSING",
    "ChainedConfigurationProvider",
    "ChainedConfigurationSource",
    "ChangeTokenRegistration",
    "CircularReferenceError",
    "ConfigurationAggregateError",
    "ConfigurationBuilder",
    "ConfigurationData",
    "ConfigurationError",
    "ConfigurationFileError",
    "ConfigurationProvider",
    "ConfigurationReloadToken",
    "ConfigurationRoot",
    "ConfigurationSection",
    "DotEnvConfigurationProvider",
    "DotEnvConfigurationSource",
    "EnvironmentProvider",
    "EnvironmentSource",
    "FileConfigurationProvider",
    "FileConfigurationSource",
    "JsonConfigurationProvider",
    "JsonConfigurationSource",
    "MemoryConfigurationProvider",
    "MemoryConfigurationSource",
    "ParseError",
    "ParseErrors",
    "ProviderRegistryEmpty",
    "SectionNotFound",
    "TomlConfigurationProvider",
    "TomlConfigurationSource",
    "YamlConfigurationProvider",
    "YamlConfigurationSource",
    "bind_configuration",
    "bind_trace_id",
    "build_configuration",
    "combine",
    "compare",
    "default_env_prefix",
    "flatten",
    "get_logger",
    "get_parent_path",
    "get_section_key",
    "iterate_configuration_entries",
    "on_change",
    "unflatten",
]
