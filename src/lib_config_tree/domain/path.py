"""Path algebra over delimiter-joined configuration keys.

Purpose
-------
Provide the pure helpers every other layer uses to build, split, and order
configuration paths such as ``"db:replicas:0:host"``.

Contents
--------
* :data:`KEY_DELIMITER` – the segment separator used by the tree model.
* :func:`combine` – join segments verbatim (empty segments are preserved).
* :func:`get_section_key` / :func:`get_parent_path` – split off the last
  segment.
* :func:`compare` / :data:`sort_key` – ordering that sorts numeric segments
  numerically and text segments case-insensitively.

System Role
-----------
Providers sort child keys with :func:`compare`; sections derive their key and
child paths with :func:`combine` and :func:`get_section_key`.
"""

from __future__ import annotations

import locale
import re
from functools import cmp_to_key
from typing import Final

KEY_DELIMITER: Final[str] = ":"
"""Separator between path segments in the configuration tree."""

_INTEGER: Final[re.Pattern[str]] = re.compile(r"-?[0-9]+")


def combine(*segments: str) -> str:
    """Join *segments* with :data:`KEY_DELIMITER`.

    Empty segments are kept so ``combine("parent", "")`` denotes the section
    with an empty name below ``parent``.

    Examples
    --------
    >>> combine("parent", "", "key")
    'parent::key'
    >>> combine()
    ''
    """

    return KEY_DELIMITER.join(segments)


def get_section_key(path: str) -> str:
    """Return the last segment of *path* (the whole path when undelimited).

    Examples
    --------
    >>> get_section_key("a::b:::c")
    'c'
    >>> get_section_key("a:::b:")
    ''
    >>> get_section_key("key")
    'key'
    """

    index = path.rfind(KEY_DELIMITER)
    return path if index < 0 else path[index + 1 :]


def get_parent_path(path: str | None) -> str | None:
    """Return *path* without its last segment, or ``None`` for top-level paths.

    The empty path has no delimiter and therefore no parent.

    Examples
    --------
    >>> get_parent_path("parent:key")
    'parent'
    >>> get_parent_path("::key")
    ':'
    >>> get_parent_path("") is None
    True
    """

    if path is None:
        return None
    index = path.rfind(KEY_DELIMITER)
    return None if index < 0 else path[:index]


def compare(x: str | None, y: str | None) -> int:
    """Order two configuration paths segment by segment.

    Why
    ----
    Child keys are presented in a stable order where array-like indices read
    naturally (``"2"`` before ``"10"``) and text keys ignore case.

    What
    ----
    ``None`` counts as the empty path and leading delimiters are skipped. Each
    pair of segments compares numerically when both match ``-?[0-9]+``,
    case-insensitively in locale order when neither does, and a numeric segment
    always sorts first. A path that is a prefix of the other sorts first.

    Returns
    -------
    int
        Negative, zero, or positive like a classic ``cmp`` function.

    Examples
    --------
    >>> compare("abc:def:2", "abc:def:10") < 0
    True
    >>> compare("a", "A")
    0
    >>> compare("::", None)
    0
    """

    x_span = _skip_delimiters(x or "")
    y_span = _skip_delimiters(y or "")
    if x_span == y_span:
        return 0

    while x_span and y_span:
        x_part, x_span = _split_first(x_span)
        y_part, y_span = _split_first(y_span)
        result = _compare_parts(x_part, y_part)
        if result != 0:
            return result

    if not x_span:
        return 0 if not y_span else -1
    return 1


sort_key = cmp_to_key(compare)
"""Key function for :func:`sorted` ordering paths with :func:`compare`."""


def _split_first(span: str) -> tuple[str, str]:
    """Return the first segment of *span* and the remainder with leading delimiters skipped."""

    index = span.find(KEY_DELIMITER)
    if index < 0:
        return span, ""
    return span[:index], _skip_delimiters(span[index + 1 :])


def _skip_delimiters(span: str) -> str:
    return span.lstrip(KEY_DELIMITER)


def _compare_parts(a: str, b: str) -> int:
    a_is_int = _INTEGER.fullmatch(a) is not None
    b_is_int = _INTEGER.fullmatch(b) is not None

    if a_is_int and b_is_int:
        a_value, b_value = int(a), int(b)
        return (a_value > b_value) - (a_value < b_value)
    if not a_is_int and not b_is_int:
        return _sign(locale.strcoll(a.lower(), b.lower()))
    return -1 if a_is_int else 1


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)
