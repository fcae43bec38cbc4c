"""CLI adapter for ``lib_config_tree`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators inspect the composed configuration (files layered below the
environment) without writing Python code.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_env_prefix` – helper exposing :func:`lib_config_tree.core.default_env_prefix`.
* :func:`cli_read` – builds a configuration and prints it as JSON.
* :func:`cli_get` – prints a single resolved value.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It calls the composition root
(:func:`lib_config_tree.core.build_configuration`) and never reaches into
adapter internals. ``lib_cli_exit_tools`` centralises the exit code strategy
so all commands behave consistently across shells and CI.
"""

from __future__ import annotations

import asyncio
import json
import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Callable, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .application.flatten import unflatten
from .application.iteration import iterate_configuration_entries
from .application.root import ConfigurationRoot
from .core import build_configuration
from .core import default_env_prefix as _default_env_prefix
from .domain.path import KEY_DELIMITER

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when not installed."""

    try:
        return metadata.version("lib_config_tree")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _source_options(command: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by ``read`` and ``get``."""

    decorators = [
        click.option(
            "--file",
            "files",
            multiple=True,
            type=click.Path(path_type=Path, dir_okay=False),
            help="Configuration file (.json, .toml, .yaml, .yml, .env); repeat to layer, later wins",
        ),
        click.option(
            "--optional/--required-files",
            default=False,
            help="Treat missing or malformed files as empty instead of failing",
            show_default=True,
        ),
        click.option(
            "--env/--no-env",
            "include_env",
            default=True,
            help="Layer environment variables above the files",
            show_default=True,
        ),
        click.option("--env-delimiter", default="__", help="Delimiter standing for ':' in variable names", show_default=True),
        click.option("--env-prefix", default=None, help="Only read variables with this prefix (stripped from keys)"),
    ]
    for decorator in reversed(decorators):
        command = decorator(command)
    return command


@click.group(
    help="Hierarchical configuration tree reader",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_config_tree",
    message="lib_config_tree version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_config_tree")
    except metadata.PackageNotFoundError:
        click.echo("lib_config_tree (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_config_tree')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")
    for entry in meta.get_all("Project-URL") or []:
        click.echo(f"  {entry}")


@cli.command("env-prefix", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("slug")
def cli_env_prefix(slug: str) -> None:
    """Compute the canonical environment prefix for *slug*.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["env-prefix", "config-tree"])
    >>> result.output.strip()
    'CONFIG_TREE_'
    """

    click.echo(_default_env_prefix(slug))


@cli.command("read", context_settings=CLICK_CONTEXT_SETTINGS)
@_source_options
@click.option("--section", default=None, help="Only print the subtree below this key (e.g. 'database:primary')")
@click.option(
    "--nested/--flat",
    default=True,
    help="Print nested JSON objects or flat 'a:b' keys",
    show_default=True,
)
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
def cli_read(
    files: Sequence[Path],
    optional: bool,
    include_env: bool,
    env_delimiter: str,
    env_prefix: Optional[str],
    section: Optional[str],
    nested: bool,
    indent: Optional[int],
) -> None:
    """Compose the configuration and print it as JSON.

    Files are layered in the order given; environment variables (unless
    ``--no-env``) override them. Keys without a value are left out.
    """

    root = _build(files, optional, include_env, env_delimiter, env_prefix)
    with root:
        target = root if section is None else root.get_required_section(section)
        entries = [
            (key, value)
            for key, value in iterate_configuration_entries(target, make_paths_relative=section is not None)
            if value is not None
        ]
    payload = unflatten(entries, delimiter=KEY_DELIMITER) if nested else dict(entries)
    click.echo(json.dumps(payload, indent=indent, separators=(",", ":") if indent is None else None))


@cli.command("get", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("key")
@_source_options
@click.option(
    "--required/--not-required",
    default=False,
    help="Fail (exit code 1) when the key has neither a value nor children",
    show_default=True,
)
def cli_get(
    key: str,
    files: Sequence[Path],
    optional: bool,
    include_env: bool,
    env_delimiter: str,
    env_prefix: Optional[str],
    required: bool,
) -> None:
    """Print the resolved value of KEY (an empty line when it has none)."""

    root = _build(files, optional, include_env, env_delimiter, env_prefix)
    with root:
        if required:
            root.get_required_section(key)
        value = root.get(key)
    click.echo("" if value is None else value)


def _build(
    files: Sequence[Path],
    optional: bool,
    include_env: bool,
    env_delimiter: str,
    env_prefix: Optional[str],
) -> ConfigurationRoot:
    return asyncio.run(
        build_configuration(
            files,
            optional=optional,
            include_environment=include_env,
            env_delimiter=env_delimiter,
            env_prefix=env_prefix,
        )
    )


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_config_tree",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
