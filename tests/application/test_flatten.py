from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_config_tree.application.flatten import flatten, unflatten
from lib_config_tree.domain.errors import CircularReferenceError


KEY = st.text(alphabet="abc", min_size=1, max_size=4)
SCALAR = st.one_of(st.none(), st.integers(), st.text(alphabet="xyz", max_size=3), st.booleans())
TREE = st.recursive(
    SCALAR,
    lambda children: st.one_of(
        st.dictionaries(KEY, children, min_size=1, max_size=3),
        st.lists(children, min_size=1, max_size=3),
    ),
    max_leaves=12,
)
DOCUMENT = st.dictionaries(KEY, TREE, max_size=4)


def test_flatten_simple_object() -> None:
    assert flatten({"a": 1, "b": {"c": 2}, "d": [3, 4]}) == {"a": 1, "b.c": 2, "d.0": 3, "d.1": 4}


def test_flatten_nested_objects_and_arrays() -> None:
    assert flatten({"a": {"b": {"c": {"d": 1}}}}) == {"a.b.c.d": 1}
    assert flatten({"a": [1, 2, [3, 4]]}) == {"a.0": 1, "a.1": 2, "a.2.0": 3, "a.2.1": 4}


def test_flatten_empty_keys_keep_delimiters() -> None:
    assert flatten({"": {"": {"": 1}}}) == {"..": 1}


def test_flatten_custom_delimiter_and_transform() -> None:
    assert flatten({"a": {"b": 1}, "c": {"d": 2}}, delimiter="/") == {"a/b": 1, "c/d": 2}
    assert flatten({"FOO": {"BAR": 1}}, delimiter="_", transform_key=str.lower) == {"foo_bar": 1}


def test_flatten_keeps_none_and_drops_empty_containers() -> None:
    assert flatten({"a": None, "c": {"d": None}, "e": {}, "f": []}) == {"a": None, "c.d": None}


def test_flatten_rejects_circular_references() -> None:
    tree: dict[str, object] = {"a": 1}
    tree["b"] = tree
    with pytest.raises(CircularReferenceError) as caught:
        flatten(tree)
    assert caught.value.path == "b.b"


def test_unflatten_simple_and_numeric_keys() -> None:
    assert unflatten({"a.b.c": 1, "a.b.d": 2}) == {"a": {"b": {"c": 1, "d": 2}}}
    assert unflatten({"a.0": "foo", "a.1": "bar"}) == {"a": ["foo", "bar"]}


def test_unflatten_custom_delimiter_and_transform() -> None:
    assert unflatten({"a|b|c": 1, "a|b|d": 2}, delimiter="|") == {"a": {"b": {"c": 1, "d": 2}}}
    assert unflatten({"a.b.c": 1, "a.b.d": 2}, transform_key=str.upper) == {"A": {"B": {"C": 1, "D": 2}}}


def test_unflatten_empty_containers() -> None:
    flat = {"a.b": {}, "c.0": [], "d.e.f": 1}
    assert unflatten(flat) == {"a": {"b": {}}, "c": [[]], "d": {"e": {"f": 1}}}


def test_unflatten_longer_path_replaces_empty_placeholder() -> None:
    assert unflatten({"a": {}, "a.b.c": 1}) == {"a": {"b": {"c": 1}}}


def test_unflatten_mixed_objects_and_arrays() -> None:
    assert unflatten({"a.0.b": 1, "a.1.c": 2, "d.e": 3}) == {"a": [{"b": 1}, {"c": 2}], "d": {"e": 3}}


def test_unflatten_accepts_pairs_and_empty_input() -> None:
    assert unflatten([("x:y", "1")], delimiter=":") == {"x": {"y": "1"}}
    assert unflatten({}) == {}


def test_unflatten_skips_paths_through_scalars() -> None:
    assert unflatten({"a": 1, "a.b": 2}) == {"a": 1}


def test_unflatten_pads_sparse_indices() -> None:
    assert unflatten({"a.2": "z"}) == {"a": [None, None, "z"]}


@given(DOCUMENT)
def test_unflatten_inverts_flatten(document) -> None:
    assert unflatten(flatten(document)) == document
