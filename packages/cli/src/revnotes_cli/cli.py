"""CLI entry point for revnotes.

Commands:
  list     — one-line summaries of open (or all) reviews
  show     — a review with all of its comment threads
  request  — ask for a review of the current branch
  comment  — comment on the current review (accept / reject are shortcuts)
  push     — push review notes to a remote
  pull     — fetch and merge review notes from a remote
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from revnotes_cli.commands.comment import accept_cmd, comment_cmd, reject_cmd
from revnotes_cli.commands.list import list_cmd
from revnotes_cli.commands.request import request_cmd
from revnotes_cli.commands.show import show_cmd
from revnotes_cli.commands.sync import pull_cmd, push_cmd

console = Console()


def _build_store(repo_path: str):
    """Instantiate the store backing all commands.

    This factory lives in cli.py so tests can swap in a MemoryStore without
    touching a real repository.
    """
    from revnotes_store.git import GitStore

    return GitStore(path=repo_path)


@click.group()
@click.version_option(
    version=importlib.metadata.version("revnotes"),
    prog_name="revnotes",
)
@click.option(
    "--config",
    "config_path",
    default=".revnotes.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="REVNOTES_CONFIG",
)
@click.option(
    "-C",
    "--repo-path",
    default=".",
    show_default=True,
    help="Run as if started in this git repository.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every git invocation.")
@click.pass_context
def main(ctx: click.Context, config_path: str, repo_path: str, verbose: bool):
    """Distributed code review stored in git notes."""
    from revnotes_core.config import load_config

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )

    ctx.ensure_object(dict)

    config = load_config(config_path)
    store = _build_store(repo_path)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.call_on_close(store.close)


main.add_command(list_cmd)
main.add_command(show_cmd)
main.add_command(request_cmd)
main.add_command(comment_cmd)
main.add_command(accept_cmd)
main.add_command(reject_cmd)
main.add_command(push_cmd)
main.add_command(pull_cmd)
