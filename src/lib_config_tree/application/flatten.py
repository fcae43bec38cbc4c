"""Conversions between nested trees and flat delimited-key mappings.

Purpose
-------
File formats produce nested objects and arrays while providers store flat
``path -> value`` pairs. :func:`flatten` and :func:`unflatten` translate
between the two shapes.

Contents
    - ``flatten``: depth-first walk producing ``{"a.b.0": leaf}`` pairs.
    - ``unflatten``: rebuild nested dicts/lists from flat pairs.
    - ``_walk`` / ``_assign_path``: recursive stanzas keeping each rule small.

System Role
-----------
File providers flatten parsed documents onto their key store; schema binding
unflattens a section's entries back into nested data.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Final, Iterable, Iterator

from ..domain.errors import CircularReferenceError

KeyTransform = Callable[[str], str]

_INDEX: Final[re.Pattern[str]] = re.compile(r"-?[0-9]+")


def flatten(
    tree: Mapping[str, Any],
    *,
    delimiter: str = ".",
    transform_key: KeyTransform | None = None,
) -> dict[str, Any]:
    """Flatten *tree* into a mapping of joined paths to scalar leaves.

    Why
    ----
    Providers store one value per path; nested documents must be collapsed
    before they can be merged into a key store.

    What
    ----
    Scalars and ``None`` become leaves. Empty mappings and sequences produce no
    key at all. Non-empty containers recurse, applying *transform_key* to each
    segment before joining with *delimiter*. Meeting an already visited
    container raises :class:`CircularReferenceError` naming the path.

    Examples
    --------
    >>> flatten({"a": 1, "b": {"c": 2}, "d": [3, 4], "e": {}})
    {'a': 1, 'b.c': 2, 'd.0': 3, 'd.1': 4}
    >>> flatten({"FOO": {"BAR": 1}}, delimiter="_", transform_key=str.lower)
    {'foo_bar': 1}
    """

    transform = transform_key or _identity
    result: dict[str, Any] = {}
    for path, value in _walk(tree, None, delimiter, transform, set()):
        result[path] = value
    return result


def unflatten(
    flat: Mapping[str, Any] | Iterable[tuple[str, Any]],
    *,
    delimiter: str = ".",
    transform_key: KeyTransform | None = None,
) -> dict[str, Any]:
    """Rebuild a nested structure from delimited keys.

    What
    ----
    Each key is split on *delimiter* and every segment passed through
    *transform_key*. An integer segment (``-?[0-9]+``) creates a list when the
    container does not exist yet, any other segment creates a dict. A later,
    longer path replaces an empty placeholder container. When a segment runs
    into an incompatible value (a scalar mid-path, a text key on a list) the
    rest of that key is skipped.

    Examples
    --------
    >>> unflatten({"a.0.b": 1, "a.1.c": 2, "d.e": 3})
    {'a': [{'b': 1}, {'c': 2}], 'd': {'e': 3}}
    >>> unflatten({"a": {}, "a.b.c": 1})
    {'a': {'b': {'c': 1}}}
    """

    transform = transform_key or _identity
    items = flat.items() if isinstance(flat, Mapping) else flat
    result: dict[str, Any] = {}
    for key, value in items:
        segments = [transform(segment) for segment in key.split(delimiter)]
        _assign_path(result, segments, value)
    return result


def _walk(
    node: Mapping[str, Any] | Sequence[Any],
    prefix: str | None,
    delimiter: str,
    transform: KeyTransform,
    seen: set[int],
) -> Iterator[tuple[str, Any]]:
    for key, value in _children(node):
        segment = transform(key)
        path = segment if prefix is None else f"{prefix}{delimiter}{segment}"
        if not _is_container(value):
            yield path, value
            continue
        if not value:
            continue
        if id(value) in seen:
            raise CircularReferenceError(path)
        seen.add(id(value))
        yield from _walk(value, path, delimiter, transform, seen)


def _assign_path(target: dict[str, Any], segments: list[str], value: Any) -> None:
    """Place *value* at *segments* inside *target*, creating containers on the way."""

    current: Any = target
    last = len(segments) - 1
    for position, segment in enumerate(segments):
        if position == last:
            _store(current, segment, value)
            return
        existing = _lookup(current, segment)
        if existing is None or _is_empty_container(existing):
            existing = [] if _INDEX.fullmatch(segments[position + 1]) else {}
            if not _store(current, segment, existing):
                return
        elif not _is_container(existing):
            return
        current = existing


def _lookup(container: Any, segment: str) -> Any:
    if isinstance(container, list):
        index = _as_index(segment)
        if index is None or index >= len(container):
            return None
        return container[index]
    return container.get(segment)


def _store(container: Any, segment: str, value: Any) -> bool:
    """Set ``container[segment] = value``; return ``False`` when the types conflict."""

    if isinstance(container, list):
        index = _as_index(segment)
        if index is None:
            return False
        if index >= len(container):
            container.extend([None] * (index + 1 - len(container)))
        container[index] = value
        return True
    container[segment] = value
    return True


def _as_index(segment: str) -> int | None:
    if _INDEX.fullmatch(segment) is None:
        return None
    index = int(segment)
    return index if index >= 0 else None


def _children(node: Mapping[str, Any] | Sequence[Any]) -> Iterable[tuple[str, Any]]:
    if isinstance(node, Mapping):
        return ((str(key), value) for key, value in node.items())
    return ((str(index), value) for index, value in enumerate(node))


def _is_container(value: Any) -> bool:
    if isinstance(value, (str, bytes, bytearray)):
        return False
    return isinstance(value, (Mapping, Sequence))


def _is_empty_container(value: Any) -> bool:
    return _is_container(value) and not value


def _identity(key: str) -> str:
    return key
