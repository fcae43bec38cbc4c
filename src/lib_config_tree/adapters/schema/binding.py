"""Bind configuration sections to pydantic models.

Purpose
-------
Turn a section of the flat configuration tree into a validated, typed object.
The model's declared fields drive the traversal: each field becomes one
``parent:child`` lookup, nested models recurse into sub-sections.

Contents
--------
* :func:`bind_configuration` – collect raw values for a model and validate.
* :func:`collect_model_values` – the recursive visitor, without validation.

System Role
-----------
Sits outside the core tree model and only uses its public surface (``get``,
``get_section``, ``get_children``). Validation failures are reported as
:class:`lib_config_tree.domain.errors.ParseErrors`.
"""

from __future__ import annotations

import typing
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ...application.flatten import unflatten
from ...application.iteration import iterate_configuration_entries
from ...domain.errors import ParseError, ParseErrors
from ...domain.path import KEY_DELIMITER, combine

ModelT = TypeVar("ModelT", bound=BaseModel)

_WRAPPER = "value"


def bind_configuration(model: type[ModelT], configuration: Any) -> ModelT:
    """Validate the values below *configuration* against *model*.

    Why
    ----
    Applications want typed settings objects while the tree stores strings;
    pydantic coerces the strings and reports every problem at once.

    Raises
    ------
    ParseErrors
        One :class:`ParseError` per validation issue, each with the field
        location as ``path``.

    Examples
    --------
    >>> from lib_config_tree.application.provider import ConfigurationProvider
    >>> from lib_config_tree.application.root import ConfigurationRoot
    >>> class Postgres(BaseModel):
    ...     host: str
    ...     port: int = 5432
    >>> provider = ConfigurationProvider()
    >>> provider.set("Postgres:Host", "db.local")
    >>> root = ConfigurationRoot([provider])
    >>> bind_configuration(Postgres, root.get_section("postgres"))
    Postgres(host='db.local', port=5432)
    """

    values = collect_model_values(model, configuration)
    try:
        return model.model_validate(values)
    except ValidationError as exc:
        issues = [ParseError(error["msg"], error["loc"]) for error in exc.errors()]
        raise ParseErrors(issues, configuration_path=getattr(configuration, "path", "")) from exc


def collect_model_values(model: type[BaseModel], configuration: Any, parent: str | None = None) -> dict[str, Any]:
    """Walk *model*'s fields and gather the raw configuration values for them.

    Fields typed as another model recurse with ``parent:field``. Other fields
    read the scalar value, or the unflattened subtree when the section has
    children (lists, dicts). ``None`` values are left out so model defaults
    apply.
    """

    values: dict[str, Any] = {}
    for name, field in model.model_fields.items():
        key = field.alias or name
        path = key if parent is None else combine(parent, key)
        nested_model = _model_type(field.annotation)
        if nested_model is not None:
            nested = collect_model_values(nested_model, configuration, path)
            if nested or configuration.get_section(path).exists():
                values[key] = nested
            continue

        section = configuration.get_section(path)
        if section.get_children():
            values[key] = _subtree(section)
            continue
        value = configuration.get(path)
        if value is not None:
            values[key] = value
    return values


def _subtree(section: Any) -> Any:
    entries = (
        (combine(_WRAPPER, relative), value)
        for relative, value in iterate_configuration_entries(section, make_paths_relative=True)
        if value is not None
    )
    return unflatten(entries, delimiter=KEY_DELIMITER).get(_WRAPPER, {})


def _model_type(annotation: Any) -> type[BaseModel] | None:
    """Return the model class behind *annotation* (also inside ``Optional``)."""

    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    for argument in typing.get_args(annotation):
        if isinstance(argument, type) and issubclass(argument, BaseModel):
            return argument
    return None
