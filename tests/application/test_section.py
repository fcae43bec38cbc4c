from __future__ import annotations

import pytest

from lib_config_tree.application.provider import ConfigurationProvider
from lib_config_tree.application.root import ConfigurationRoot
from lib_config_tree.application.section import ConfigurationSection


@pytest.fixture()
def root() -> ConfigurationRoot:
    provider = ConfigurationProvider()
    for key, value in {
        "Data:DB1:Connection1": "MemVal1",
        "Data:DB1:Connection2": "MemVal2",
        "DataSource:DB2:Connection": "MemVal3",
        "Key1::Key3": "value13",
        ":Key2": "value2",
        "Key1:": "value1",
    }.items():
        provider.set(key, value)
    return ConfigurationRoot([provider])


def test_section_reads_relative_keys(root: ConfigurationRoot) -> None:
    section = root.get_section("data")
    assert section.get("db1:connection1") == "MemVal1"
    assert section.get_section("DB1").get("Connection2") == "MemVal2"
    assert section.key == "data"
    assert section.value is None


def test_section_write_goes_through_root(root: ConfigurationRoot) -> None:
    section = root.get_section("Data:DB1")
    section.set("Connection1", "changed")
    section.get_section("Extra").value = "new"
    assert root.get("data:db1:connection1") == "changed"
    assert root.get("Data:DB1:Extra") == "new"


def test_exists_checks_value_or_children(root: ConfigurationRoot) -> None:
    assert root.get_section("Data").exists()
    assert root.get_section("Data:DB1:Connection1").exists()
    assert not root.get_section("DataSource:DB1").exists()
    assert not root.get_section("Dat").exists()


def test_empty_named_sections(root: ConfigurationRoot) -> None:
    assert root.get_section("Key1").get_section("").value == "value1"
    assert root.get_section("Key1::Key3").value == "value13"
    assert root.get_section(":Key2").value == "value2"
    assert root.get_section("").get_section("Key2").value == "value2"
    assert [child.path for child in root.get_section("Key1:").get_children()] == ["Key1::Key3"]


def test_sections_compare_by_root_and_path(root: ConfigurationRoot) -> None:
    assert root.get_section("Data") == root.get_section("Data")
    assert hash(root.get_section("Data")) == hash(root.get_section("Data"))
    assert root.get_section("Data") != root.get_section("DataSource")
    other = ConfigurationRoot([])
    assert ConfigurationSection(other, "Data") != root.get_section("Data")


def test_section_iteration_uses_full_paths(root: ConfigurationRoot) -> None:
    assert list(root.get_section("Data")) == [
        ("Data:DB1", None),
        ("Data:DB1:Connection1", "MemVal1"),
        ("Data:DB1:Connection2", "MemVal2"),
    ]


def test_section_shares_root_token(root: ConfigurationRoot) -> None:
    assert root.get_section("Data").get_reload_token() is root.get_reload_token()
