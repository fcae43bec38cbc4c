"""Depth-first walk over a configuration tree."""

from __future__ import annotations

from typing import Any, Iterator


def iterate_configuration_entries(
    configuration: Any,
    make_paths_relative: bool = False,
) -> Iterator[tuple[str, str | None]]:
    """Yield ``(path, value)`` for *configuration* and every section below it.

    Why
    ----
    Exporting, debugging, and schema binding all need the whole subtree as
    flat pairs, including branch nodes whose value is ``None``.

    What
    ----
    Pre-order, depth-first, children in :func:`~lib_config_tree.domain.path.compare`
    order. A starting section is yielded first; a root has no entry of its
    own. With *make_paths_relative* the starting section is skipped (its key
    would be empty) and its path plus the following delimiter are trimmed
    from every yielded path.

    Parameters
    ----------
    configuration:
        A root or a section. Sections expose ``path``; roots do not.
    make_paths_relative:
        Trim the starting section's path from the returned keys.

    Examples
    --------
    >>> from lib_config_tree.application.provider import ConfigurationProvider
    >>> from lib_config_tree.application.root import ConfigurationRoot
    >>> provider = ConfigurationProvider()
    >>> provider.set("a:b", "1")
    >>> provider.set("a:c", "2")
    >>> root = ConfigurationRoot([provider])
    >>> list(iterate_configuration_entries(root))
    [('a', None), ('a:b', '1'), ('a:c', '2')]
    >>> list(iterate_configuration_entries(root.get_section("a")))
    [('a', None), ('a:b', '1'), ('a:c', '2')]
    >>> list(iterate_configuration_entries(root.get_section("a"), make_paths_relative=True))
    [('b', '1'), ('c', '2')]
    """

    start_path = getattr(configuration, "path", None)
    if start_path is not None and not make_paths_relative:
        yield start_path, configuration.value
    prefix_length = len(start_path) + 1 if make_paths_relative and start_path is not None else 0
    yield from iterate_descendants(configuration, prefix_length)


def iterate_descendants(configuration: Any, prefix_length: int = 0) -> Iterator[tuple[str, str | None]]:
    """Yield ``(path, value)`` for every section strictly below *configuration*.

    *prefix_length* characters are cut from the front of each path.
    """

    stack = list(reversed(configuration.get_children()))
    while stack:
        section = stack.pop()
        yield section.path[prefix_length:], section.value
        stack.extend(reversed(section.get_children()))
