from __future__ import annotations

from pathlib import Path

import pytest

from lib_config_tree.adapters.dotenv.default import DotEnvConfigurationSource, parse_dotenv
from lib_config_tree.adapters.env.default import DEFAULT_ENV_DELIMITER, env_key_to_path
from lib_config_tree.domain.errors import ConfigurationFileError


def test_parse_dotenv_handles_comments_quotes_and_nesting() -> None:
    text = "\n".join(
        [
            "# leading comment",
            "",
            "SERVICE__TIMEOUT=15",
            "export TOKEN='abc # not a comment'",
            'DB__PASSWORD="s3cr3t" # trailing',
            "PLAIN=value # comment",
            "EMPTY=",
        ]
    )
    assert parse_dotenv(text) == {
        "SERVICE:TIMEOUT": "15",
        "TOKEN": "abc # not a comment",
        "DB:PASSWORD": "s3cr3t",
        "PLAIN": "value",
        "EMPTY": "",
    }


def test_parse_dotenv_rejects_lines_without_assignment() -> None:
    with pytest.raises(ConfigurationFileError, match="Malformed line 2"):
        parse_dotenv("A=1\nBROKEN\n", source=".env")


@pytest.mark.asyncio
async def test_dotenv_file_source(tmp_path: Path) -> None:
    path = tmp_path / ".env"
    path.write_text("APP__NAME=demo\nAPP__DEBUG=true\n", encoding="utf-8")
    provider = await DotEnvConfigurationSource(path).build(None)
    assert provider.get("app:name") == "demo"
    assert provider.get_child_keys([], "app") == ["DEBUG", "NAME"]


@pytest.mark.asyncio
async def test_malformed_dotenv_file_raises_unless_optional(tmp_path: Path) -> None:
    path = tmp_path / ".env"
    path.write_text("NOT VALID\n", encoding="utf-8")
    with pytest.raises(ConfigurationFileError, match="Failed to parse DOTENV"):
        await DotEnvConfigurationSource(path).build(None)
    assert len((await DotEnvConfigurationSource(path, optional=True).build(None)).data) == 0


def test_dotenv_keys_follow_the_environment_rule() -> None:
    parsed = parse_dotenv("DB__PRIMARY__HOST=x\nPLAIN=y\n")
    assert parsed == {"DB:PRIMARY__HOST": "x", "PLAIN": "y"}
    assert list(parsed) == [env_key_to_path("DB__PRIMARY__HOST", DEFAULT_ENV_DELIMITER), "PLAIN"]
