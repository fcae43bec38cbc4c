"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by providers, the configuration root,
and consuming applications. The hierarchy lives in the domain layer so every
outer layer (adapters, CLI) can raise and catch the same family of errors.

Contents
--------
* :class:`ConfigurationError` – umbrella base class for all library failures.
* :class:`ProviderRegistryEmpty` – a write was attempted on a root without
  providers.
* :class:`SectionNotFound` – a required section does not exist.
* :class:`ConfigurationFileError` – a file source could not be read, parsed or
  watched.
* :class:`CircularReferenceError` – :func:`flatten` met an object twice.
* :class:`ParseError` – one schema validation issue.
* :class:`ConfigurationAggregateError` / :class:`ParseErrors` – several
  failures reported together.

System Role
-----------
Callers catch :class:`ConfigurationError` to handle all library failures
uniformly; the more specific types carry the offending path or cause for
programmatic handling.
"""

from __future__ import annotations

from typing import Iterable, Sequence


class ConfigurationError(Exception):
    """Base type for all exceptions emitted by ``lib_config_tree``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class ProviderRegistryEmpty(ConfigurationError):
    """Raised when a value is written to a root that owns no providers.

    Examples
    --------
    >>> str(ProviderRegistryEmpty())
    'No providers are available.'
    """

    def __init__(self) -> None:
        super().__init__("No providers are available.")


class SectionNotFound(ConfigurationError):
    """Raised by ``get_required_section`` when the section does not exist.

    Examples
    --------
    >>> error = SectionNotFound("db:primary")
    >>> error.path
    'db:primary'
    >>> str(error)
    'No configuration section found with the key "db:primary".'
    """

    def __init__(self, path: str) -> None:
        super().__init__(f'No configuration section found with the key "{path}".')
        self.path = path


class ConfigurationFileError(ConfigurationError):
    """Raised when a file-backed provider cannot read, parse, or watch its file.

    Why
    ----
    Distinguish file problems from programming errors while keeping the
    original exception reachable through ``__cause__``.
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class CircularReferenceError(ConfigurationError):
    """Raised when flattening meets a nested container it already visited.

    Examples
    --------
    >>> CircularReferenceError("b.b").path
    'b.b'
    """

    def __init__(self, path: str) -> None:
        super().__init__("Circular references are not supported.")
        self.path = path


class ParseError(ConfigurationError):
    """One validation issue produced while binding a section to a schema."""

    def __init__(self, message: str, path: Sequence[object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path: tuple[object, ...] = tuple(path or ())


class ConfigurationAggregateError(ConfigurationError):
    """Report several failures collected while attempting every step of an operation.

    Why
    ----
    Disposal and change notification must run to completion even when one
    participant fails; the collected failures are surfaced afterwards.
    """

    def __init__(self, message: str, errors: Iterable[BaseException]) -> None:
        super().__init__(message)
        self.message = message
        self.errors: list[BaseException] = list(errors)


class ParseErrors(ConfigurationAggregateError):
    """Aggregate of :class:`ParseError` issues for one configuration path.

    Examples
    --------
    >>> error = ParseErrors([ParseError("field required", ("db", "host"))], configuration_path="app")
    >>> str(error)
    'Configuration parse errors at "app" path.'
    >>> error.errors[0].path
    ('db', 'host')
    """

    def __init__(self, issues: Iterable[ParseError], *, configuration_path: str) -> None:
        super().__init__(f'Configuration parse errors at "{configuration_path}" path.', issues)
        self.configuration_path = configuration_path

    @property
    def issues(self) -> list[ParseError]:
        return [error for error in self.errors if isinstance(error, ParseError)]
