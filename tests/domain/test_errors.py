from __future__ import annotations

import pytest

from lib_config_tree.domain.errors import (
    CircularReferenceError,
    ConfigurationAggregateError,
    ConfigurationError,
    ConfigurationFileError,
    ParseError,
    ParseErrors,
    ProviderRegistryEmpty,
    SectionNotFound,
)


def test_error_hierarchy() -> None:
    for error_type in (
        ProviderRegistryEmpty,
        SectionNotFound,
        ConfigurationFileError,
        CircularReferenceError,
        ParseError,
        ConfigurationAggregateError,
    ):
        assert issubclass(error_type, ConfigurationError)
    assert issubclass(ParseErrors, ConfigurationAggregateError)


def test_messages_and_attributes() -> None:
    assert str(ProviderRegistryEmpty()) == "No providers are available."
    missing = SectionNotFound("db")
    assert missing.path == "db"
    assert str(missing) == 'No configuration section found with the key "db".'
    circular = CircularReferenceError("a.b")
    assert (circular.path, str(circular)) == ("a.b", "Circular references are not supported.")
    file_error = ConfigurationFileError("boom", path="app.json")
    assert file_error.path == "app.json"


def test_parse_errors_expose_issues() -> None:
    issue = ParseError("Field required", ["db", 0, "host"])
    error = ParseErrors([issue], configuration_path="")
    assert str(error) == 'Configuration parse errors at "" path.'
    assert error.issues == [issue]
    assert issue.path == ("db", 0, "host")
    assert issue.message == "Field required"


def test_aggregate_keeps_every_error() -> None:
    first, second = ValueError("a"), RuntimeError("b")
    with pytest.raises(ConfigurationAggregateError) as caught:
        raise ConfigurationAggregateError("many", [first, second])
    assert caught.value.errors == [first, second]
