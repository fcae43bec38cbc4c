"""`.env` file adapter.

Purpose
-------
Read ``KEY=VALUE`` files as a file-backed configuration source. Keys use the
same ``__`` nesting convention as environment variables, so a ``.env`` file
and the process environment describe the same tree.

Contents
--------
* :class:`DotEnvConfigurationSource` / :class:`DotEnvConfigurationProvider`.
* :func:`parse_dotenv` plus the small helpers it relies on.
"""

from __future__ import annotations

from typing import Mapping

from ...domain.errors import ConfigurationFileError
from ..env.default import DEFAULT_ENV_DELIMITER, env_key_to_path
from ..file_loaders.structured import FileConfigurationProvider, FileConfigurationSource


class DotEnvConfigurationSource(FileConfigurationSource):
    """Dotenv file source; optional, reload, and watch behaviour as for other files."""

    format_name = "dotenv"

    def create_provider(self) -> DotEnvConfigurationProvider:
        return DotEnvConfigurationProvider(self)


class DotEnvConfigurationProvider(FileConfigurationProvider):
    def parse(self, payload: bytes) -> Mapping[str, str]:
        return parse_dotenv(payload.decode("utf-8"), source=self.source.path)


def parse_dotenv(text: str, *, source: str = "<string>") -> dict[str, str]:
    """Parse dotenv *text* into flat configuration keys.

    Why
    ----
    Dotenv parsing must be strict so a typo surfaces as an error instead of a
    silently missing setting.

    What
    ----
    Blank lines and ``#`` comments are skipped, an optional ``export`` prefix
    is accepted, surrounding quotes and trailing `` #`` comments are removed,
    and the first ``__`` in a key becomes ``:``, as for environment variables.

    Raises
    ------
    ConfigurationFileError
        When a line has no ``=``.

    Examples
    --------
    >>> parse_dotenv('# comment\\nSERVICE__TIMEOUT=10\\nexport TOKEN="secret" # note\\n')
    {'SERVICE:TIMEOUT': '10', 'TOKEN': 'secret'}
    """

    result: dict[str, str] = {}
    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if "=" not in line:
            raise ConfigurationFileError(f"Malformed line {line_number} in {source}", path=source)
        key, value = line.split("=", 1)
        name = key.strip()
        result[env_key_to_path(name, DEFAULT_ENV_DELIMITER) or name] = _strip_quotes(value.strip())
    return result


def _strip_quotes(value: str) -> str:
    """Trim surrounding quotes and inline comments from ``value``.

    Examples
    --------
    >>> _strip_quotes('"token"')
    'token'
    >>> _strip_quotes("value # comment")
    'value'
    """

    if value[:1] in {'"', "'"}:
        closing = value.find(value[0], 1)
        if closing > 0:
            return value[1:closing]
    if value.startswith("#"):
        return ""
    if " #" in value:
        return value.split(" #", 1)[0].strip()
    return value
