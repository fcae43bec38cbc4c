from __future__ import annotations

import pytest

from lib_config_tree.adapters.chained import ChainedConfigurationProvider, ChainedConfigurationSource
from lib_config_tree.adapters.memory import MemoryConfigurationProvider, MemoryConfigurationSource
from lib_config_tree.application.iteration import iterate_configuration_entries
from lib_config_tree.core import ConfigurationBuilder
from lib_config_tree.domain.data import MISSING


async def _root(*layers: dict[str, str | None]):
    builder = ConfigurationBuilder()
    for layer in layers:
        builder.add(MemoryConfigurationSource(layer))
    return await builder.build()


@pytest.mark.asyncio
async def test_memory_source_loads_verbatim() -> None:
    provider = await MemoryConfigurationSource({"Mem:Key": "value", "Mem:Empty": None}).build(None)
    assert isinstance(provider, MemoryConfigurationProvider)
    assert provider.get("MEM:KEY") == "value"
    assert provider.get("mem:empty") is None
    assert provider.get("mem:other") is MISSING


@pytest.mark.asyncio
async def test_memory_source_defaults_to_empty() -> None:
    provider = await MemoryConfigurationSource().build(None)
    assert len(provider.data) == 0


@pytest.mark.asyncio
async def test_chain_empty_keys() -> None:
    root = await _root({" " * index: "" for index in range(1000)})
    provider = ChainedConfigurationProvider(ChainedConfigurationSource(root))
    child_keys = provider.get_child_keys([])
    assert len(child_keys) == 1000
    assert child_keys[0] == ""


@pytest.mark.asyncio
async def test_chain_keys_without_delimiter() -> None:
    root = await _root({str(index): "" for index in range(1000, 2000)})
    provider = ChainedConfigurationProvider(ChainedConfigurationSource(root))
    child_keys = provider.get_child_keys([])
    assert len(child_keys) == 1000
    assert (child_keys[0], child_keys[999]) == ("1000", "1999")


@pytest.mark.asyncio
async def test_chained_configuration_reads_through() -> None:
    inner = await _root(
        {"Mem1:KeyInMem1": "ValueInMem1"},
        {"Mem2:KeyInMem2": "ValueInMem2"},
        {"Mem3:KeyInMem3": "ValueInMem3"},
    )
    chained = await ConfigurationBuilder().add_chained_configuration(inner).build()
    assert chained.get("mem1:keyinmem1") == "ValueInMem1"
    assert chained.get("Mem2:KeyInMem2") == "ValueInMem2"
    assert chained.get("MEM3:KEYINMEM3") == "ValueInMem3"
    assert chained.get("NotExist") is None


@pytest.mark.asyncio
async def test_chained_absent_value_defers_to_lower_layer() -> None:
    inner = await _root({"only:inner": "inner"})
    root = await (
        ConfigurationBuilder()
        .add_memory_collection({"only:lower": "lower"})
        .add_chained_configuration(inner)
        .build()
    )
    assert root.get("only:lower") == "lower"
    assert root.get("only:inner") == "inner"
    assert [child.key for child in root.get_children("only")] == ["inner", "lower"]


@pytest.mark.asyncio
@pytest.mark.parametrize("make_paths_relative", [True, False])
async def test_chained_entries_flatten(make_paths_relative: bool) -> None:
    inner = await _root(
        {"Mem1": "Value1", "Mem1:": "NoKeyValue1", "Mem1:KeyInMem1": "ValueInMem1", "Mem1:KeyInMem1:Deep1": "ValueDeep1"},
        {"Mem2": "Value2", "Mem2:": "NoKeyValue2", "Mem2:KeyInMem2": "ValueInMem2", "Mem2:KeyInMem2:Deep2": "ValueDeep2"},
    )
    root = await (
        ConfigurationBuilder()
        .add_chained_configuration(inner)
        .add_memory_collection(
            {"Mem3": "Value3", "Mem3:": "NoKeyValue3", "Mem3:KeyInMem3": "ValueInMem3", "Mem3:KeyInMem3:Deep3": "ValueDeep3"}
        )
        .build()
    )
    entries = dict(iterate_configuration_entries(root, make_paths_relative))
    assert entries == {
        "Mem1": "Value1",
        "Mem1:": "NoKeyValue1",
        "Mem1:KeyInMem1": "ValueInMem1",
        "Mem1:KeyInMem1:Deep1": "ValueDeep1",
        "Mem2": "Value2",
        "Mem2:": "NoKeyValue2",
        "Mem2:KeyInMem2": "ValueInMem2",
        "Mem2:KeyInMem2:Deep2": "ValueDeep2",
        "Mem3": "Value3",
        "Mem3:": "NoKeyValue3",
        "Mem3:KeyInMem3": "ValueInMem3",
        "Mem3:KeyInMem3:Deep3": "ValueDeep3",
    }


@pytest.mark.asyncio
async def test_chained_set_and_token_proxy_to_inner() -> None:
    inner = await _root({"a": "1"})
    provider = await ChainedConfigurationSource(inner).build(None)
    provider.set("a", "2")
    assert inner.get("a") == "2"
    assert provider.get_reload_token() is inner.get_reload_token()


@pytest.mark.asyncio
async def test_outer_root_observes_inner_changes() -> None:
    inner = await _root({"a": "1"})
    outer = await ConfigurationBuilder().add_chained_configuration(inner).build()
    token = outer.get_reload_token()
    await inner.reload()
    assert token.has_changed


@pytest.mark.asyncio
@pytest.mark.parametrize("dispose", [True, False])
async def test_dispose_configuration_flag(dispose: bool) -> None:
    inner = await _root({"a": "1"})
    closed: list[bool] = []
    original_close = inner.close

    def tracking_close() -> None:
        closed.append(True)
        original_close()

    inner.close = tracking_close  # type: ignore[method-assign]
    outer = await ConfigurationBuilder().add_chained_configuration(inner, dispose_configuration=dispose).build()
    outer.close()
    assert closed == ([True] if dispose else [])
