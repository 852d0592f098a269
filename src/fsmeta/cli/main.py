"""
fsmeta CLI entry point.

Commands:
  fsm db init [--format F] [DIR]   — create a repository (.fsm) in DIR
  fsm db info | dump | drop        — inspect or remove the repository
  fsm set [-t k[:v]] [-d k] ...    — tag and comment paths (one batch)
  fsm get [--all] [--self] ...     — show metadata for paths
  fsm delete [--not-exists] ...    — remove entries
  fsm rename CURRENT RENAMED       — move an entry to a new path
  fsm coll create|delete|push|pop|view
                                   — named collections of paths
  fsm open -t KEY [--self] [PATH]  — open a URL tag with an external app
  fsm config show | validate | init
                                   — user configuration
  fsm version                      — show version information
"""

from __future__ import annotations

import sys
from typing import Any

import click
from rich.console import Console
from rich.markup import escape

from fsmeta import __version__
from fsmeta.cli._coll import coll_group
from fsmeta.cli._common import err_console, handle_errors
from fsmeta.cli._config_cmd import config_group
from fsmeta.cli._db import db_group
from fsmeta.core.exceptions import FsmetaError

console = Console()


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", message="fsm %(version)s")
@click.option("--verbose", "-V", is_flag=True, default=False, help="Log progress (INFO)")
@click.option("--debug", is_flag=True, default=False, help="Log everything (DEBUG)")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool) -> None:
    """fsmeta — tags, comments and collections for files, stored beside them."""
    from fsmeta.core.config import load_config
    from fsmeta.core.logging_setup import configure_logging

    if verbose and debug:
        raise click.UsageError("--verbose and --debug are mutually exclusive")

    try:
        config = load_config()
    except FsmetaError as exc:
        # config subcommands report this themselves
        if ctx.invoked_subcommand != "config":
            err_console.print(f"[red]Config error:[/red] {escape(str(exc))}")
            sys.exit(int(exc.exit_code))
        config = None

    level = "DEBUG" if debug else "INFO" if verbose else None
    if config is not None:
        configure_logging(level or config.logging.level, config.logging.format)
    else:
        configure_logging(level or "WARNING")
    ctx.obj = config


cli.add_command(db_group, "db")
cli.add_command(coll_group, "coll")
cli.add_command(config_group, "config")


# ---------------------------------------------------------------------------
# set
# ---------------------------------------------------------------------------


def _tag_specs(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]) -> Any:
    from fsmeta.core.values import parse_tag_spec

    try:
        return [parse_tag_spec(v) for v in value]
    except FsmetaError as exc:
        raise click.BadParameter(str(exc)) from exc


def _url_tag_specs(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]) -> Any:
    from fsmeta.core.values import parse_url_tag_spec

    try:
        return [parse_url_tag_spec(v) for v in value]
    except FsmetaError as exc:
        raise click.BadParameter(str(exc)) from exc


def _int_tag_specs(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]) -> Any:
    from fsmeta.core.values import parse_int_tag_spec

    try:
        return [parse_int_tag_spec(v) for v in value]
    except FsmetaError as exc:
        raise click.BadParameter(str(exc)) from exc


def _tag_keys(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]) -> Any:
    from fsmeta.core.values import validate_tag_key

    try:
        return [validate_tag_key(v) for v in value]
    except FsmetaError as exc:
        raise click.BadParameter(str(exc)) from exc


def _tag_key(ctx: click.Context, param: click.Parameter, value: str) -> Any:
    return _tag_keys(ctx, param, (value,))[0]


@cli.command("set")
@click.option(
    "--tag", "-t", "tags", multiple=True, callback=_tag_specs, metavar="KEY[:VALUE]",
    help="Set a tag; the value is typed as int, bool, url or string",
)
@click.option(
    "--tag-url", "url_tags", multiple=True, callback=_url_tag_specs, metavar="KEY:URL",
    help="Set a tag whose value must be a URL",
)
@click.option(
    "--tag-num", "num_tags", multiple=True, callback=_int_tag_specs, metavar="KEY:INT",
    help="Set a tag whose value must be a 64-bit integer",
)
@click.option(
    "--drop", "-d", "drops", multiple=True, callback=_tag_keys, metavar="KEY",
    help="Remove a tag (no error if absent)",
)
@click.option("--drop-all", is_flag=True, default=False, help="Remove every tag first")
@click.option("--comment", "-c", default=None, help="Set the comment")
@click.option("--drop-comment", is_flag=True, default=False, help="Remove the comment")
@click.option(
    "--self", "self_", is_flag=True, default=False, help="Also target the repository itself"
)
@click.argument("paths", nargs=-1, type=click.Path())
@handle_errors
def set_cmd(
    tags: list[tuple[str, str | None]],
    url_tags: list[tuple[str, str]],
    num_tags: list[tuple[str, str]],
    drops: list[str],
    drop_all: bool,
    comment: str | None,
    drop_comment: bool,
    self_: bool,
    paths: tuple[str, ...],
) -> None:
    """Tag and comment PATHS; all changes apply together or not at all."""
    from fsmeta.cli._set import cmd_set

    if comment is not None and drop_comment:
        raise click.UsageError("--comment and --drop-comment are mutually exclusive")
    if not paths and not self_:
        raise click.UsageError("Give at least one PATH or --self")
    tags = [*tags, *url_tags, *num_tags]
    if not (tags or drops or drop_all or comment is not None or drop_comment):
        raise click.UsageError(
            "Nothing to do: pass -t, --tag-url, --tag-num, -d, --drop-all, -c or --drop-comment"
        )

    cmd_set(
        paths=list(paths),
        include_self=self_,
        tags=tags,
        drops=drops,
        drop_all=drop_all,
        comment=comment,
        drop_comment=drop_comment,
        console=console,
    )


# ---------------------------------------------------------------------------
# get
# ---------------------------------------------------------------------------


def _split_keys(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]) -> Any:
    keys = [k.strip() for v in value for k in v.split(",") if k.strip()]
    return _tag_keys(ctx, param, tuple(keys))


@cli.command("get")
@click.option("--all", "all_", is_flag=True, default=False, help="Every entry in the repository")
@click.option("--self", "self_", is_flag=True, default=False, help="The repository's own metadata")
@click.option("--no-tags", is_flag=True, default=False, help="Do not show tags")
@click.option("--no-comment", is_flag=True, default=False, help="Do not show comments")
@click.option(
    "--sort-by", default="name", show_default=True,
    help="Comma-separated: name, created, updated, date",
)
@click.option("--includes-tags", multiple=True, callback=_split_keys, help="Require these tags")
@click.option("--excludes-tags", multiple=True, callback=_split_keys, help="Reject these tags")
@click.option("--json", "as_json", is_flag=True, default=False)
@click.argument("paths", nargs=-1, type=click.Path())
@handle_errors
def get_cmd(
    all_: bool,
    self_: bool,
    no_tags: bool,
    no_comment: bool,
    sort_by: str,
    includes_tags: list[str],
    excludes_tags: list[str],
    as_json: bool,
    paths: tuple[str, ...],
) -> None:
    """Show tags and comments for PATHS (default: the current directory)."""
    from fsmeta.cli._get import SORT_KEYS, cmd_get

    if no_tags and no_comment:
        raise click.UsageError("--no-tags and --no-comment are mutually exclusive")
    order = [s.strip() for s in sort_by.split(",") if s.strip()]
    unknown = [s for s in order if s not in SORT_KEYS]
    if unknown:
        raise click.BadParameter(
            f"unknown sort key(s): {', '.join(unknown)}", param_hint="--sort-by"
        )

    cmd_get(
        paths=list(paths) or ([] if all_ or self_ else ["."]),
        all_=all_,
        include_self=self_ or all_,
        show_tags=not no_tags,
        show_comment=not no_comment,
        sort_by=order,
        includes=includes_tags,
        excludes=excludes_tags,
        as_json=as_json,
        console=console,
    )


# ---------------------------------------------------------------------------
# delete / rename
# ---------------------------------------------------------------------------


@cli.command("delete")
@click.option("--not-exists", is_flag=True, default=False, help="Remove entries whose file is gone")
@click.argument("paths", nargs=-1, type=click.Path())
@handle_errors
def delete_cmd(not_exists: bool, paths: tuple[str, ...]) -> None:
    """Remove the entries for PATHS from the repository."""
    from fsmeta.cli._entries import cmd_delete

    if not paths and not not_exists:
        raise click.UsageError("Give at least one PATH or --not-exists")
    cmd_delete(paths=list(paths), not_exists=not_exists, console=console)


@cli.command("rename")
@click.option("--exists", is_flag=True, default=False, help="Require RENAMED to exist on disk")
@click.argument("current", type=click.Path())
@click.argument("renamed", type=click.Path())
@handle_errors
def rename_cmd(exists: bool, current: str, renamed: str) -> None:
    """Move the entry for CURRENT to RENAMED."""
    from fsmeta.cli._entries import cmd_rename

    cmd_rename(current=current, renamed=renamed, require_exists=exists, console=console)


# ---------------------------------------------------------------------------
# open
# ---------------------------------------------------------------------------


@cli.command("open")
@click.option("--tag", "-t", "tag", required=True, callback=_tag_key, metavar="KEY")
@click.option("--self", "self_", is_flag=True, default=False, help="Use the repository's own tag")
@click.argument("paths", nargs=-1, type=click.Path())
@click.pass_obj
@handle_errors
def open_cmd(config: Any, tag: str, self_: bool, paths: tuple[str, ...]) -> None:
    """Open the URL stored in tag KEY for each PATH (or for the repository)."""
    from fsmeta.cli._open import cmd_open

    if not paths and not self_:
        raise click.UsageError("Give at least one PATH or --self")
    command = config.open.command if config is not None else ""
    cmd_open(tag=tag, paths=list(paths), include_self=self_, command=command, console=console)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False)
def version(as_json: bool) -> None:
    """Show version information."""
    import platform

    if as_json:
        import json

        click.echo(
            json.dumps(
                {
                    "fsmeta": __version__,
                    "python": sys.version.split()[0],
                    "platform": sys.platform,
                    "arch": platform.machine(),
                },
                indent=2,
            )
        )
    else:
        console.print(f"fsmeta {__version__}")
        console.print(f"Python {sys.version.split()[0]}")
        console.print(f"Platform: {sys.platform} {platform.machine()}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
