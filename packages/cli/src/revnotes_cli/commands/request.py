"""request command — ask for a review of the current branch."""

from __future__ import annotations

import click
from rich.console import Console

from revnotes_cli.helpers import get_store_and_config, now_timestamp
from revnotes_core.identity import resolve_author
from revnotes_core.request import Request
from revnotes_core.review import add_request
from revnotes_store.errors import GitError

console = Console()


@click.command("request")
@click.option("--message", "-m", "description", default="", help="Description of the change.")
@click.option("--target", "target_ref", default=None, help="Ref the change should land in. Overrides config file.")
@click.option("--reviewer", "-r", "reviewers", multiple=True, help="Email of a requested reviewer. Repeatable.")
@click.pass_context
def request_cmd(ctx, description: str, target_ref: str | None, reviewers: tuple[str, ...]):
    """Request a review of the checked-out branch.

    The request is attached to the first commit on the branch that is not
    yet in the target ref.
    """
    store, config = get_store_and_config(ctx)
    target_ref = target_ref or config["target_ref"]

    author = resolve_author(config, store)
    if not author:
        raise click.UsageError("No author found. Set REVNOTES_AUTHOR or run `git config user.email <email>` first.")

    try:
        review_ref = store.get_head_ref()
        if review_ref == target_ref:
            raise click.UsageError(f"The current ref {review_ref} is the review target; check out a branch first.")
        commits = store.list_commits_between(target_ref, review_ref)
        if not commits:
            raise click.UsageError(f"There are no commits on {review_ref} that are not already in {target_ref}.")
        base_commit = store.merge_base(target_ref, review_ref)

        request = Request(
            timestamp=now_timestamp(),
            requester=author,
            review_ref=review_ref,
            target_ref=target_ref,
            description=description,
            base_commit=base_commit,
            reviewers=list(reviewers),
        )
        add_request(store, commits[0], request, config["request_ref"])
    except GitError as e:
        raise click.ClickException(str(e))

    console.print(f"[green]Review requested for {review_ref} at {commits[0]}.[/green]")
