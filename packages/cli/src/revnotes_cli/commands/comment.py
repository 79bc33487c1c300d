"""comment, accept and reject commands — add to the current review's discussion."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click
from rich.console import Console

from revnotes_cli.helpers import get_store_and_config, now_timestamp
from revnotes_core.comment import Comment, Location, Resolution
from revnotes_core.identity import resolve_author
from revnotes_core.review import AmbiguousReviewError, add_comment, get_current
from revnotes_store.errors import GitError, NotesParseError

if TYPE_CHECKING:
    from revnotes_core.thread import CommentThread

console = Console()


def _all_hashes(threads: list[CommentThread]) -> set[str]:
    hashes: set[str] = set()
    for thread in threads:
        hashes.add(thread.comment.hash)
        hashes |= _all_hashes(thread.children)
    return hashes


def _post_comment(
    ctx: click.Context,
    message: str,
    parent: str | None,
    resolved: Resolution,
    location: Location | None = None,
) -> None:
    """Append a comment to the open review for the checked-out ref."""
    store, config = get_store_and_config(ctx)

    author = resolve_author(config, store)
    if not author:
        raise click.UsageError("No author found. Set REVNOTES_AUTHOR or run `git config user.email <email>` first.")

    try:
        review = get_current(store, config["request_ref"], config["comment_ref"])
    except (GitError, NotesParseError, AmbiguousReviewError) as e:
        raise click.ClickException(str(e))
    if review is None:
        raise click.UsageError("There is no open review for the current ref. Run `revnotes request` first.")

    if parent and parent not in _all_hashes(review.comments):
        raise click.UsageError(f"No comment with hash {parent} in the review at {review.revision}.")

    comment = Comment(
        timestamp=now_timestamp(),
        author=author,
        description=message,
        parent=parent or "",
        resolved=resolved,
        location=location,
    )
    try:
        comment_hash = add_comment(store, review.revision, comment, config["comment_ref"])
    except GitError as e:
        raise click.ClickException(str(e))
    console.print(f"[green]Added comment {comment_hash} to {review.revision}.[/green]")


@click.command("comment")
@click.option("--message", "-m", required=True, help="Comment text.")
@click.option("--parent", "-p", default=None, help="Hash of the comment being replied to.")
@click.option("--file", "path", default=None, help="File the comment applies to.")
@click.option("--line", type=int, default=None, help="Line the comment applies to. Requires --file.")
@click.option("--lgtm/--needs-work", "lgtm", default=None, help="Accept, or ask for changes. Omit for an FYI comment.")
@click.pass_context
def comment_cmd(ctx, message: str, parent: str | None, path: str | None, line: int | None, lgtm: bool | None):
    """Comment on the open review for the current branch."""
    if line is not None and path is None:
        raise click.UsageError("--line requires --file.")
    location = Location(path=path, start_line=line or 0) if path else None
    _post_comment(ctx, message, parent, Resolution.from_bool(lgtm), location)


@click.command("accept")
@click.option("--message", "-m", default="", help="Optional comment text.")
@click.option("--parent", "-p", default=None, help="Hash of the comment being accepted.")
@click.pass_context
def accept_cmd(ctx, message: str, parent: str | None):
    """Accept the open review for the current branch."""
    _post_comment(ctx, message, parent, Resolution.ACCEPTED)


@click.command("reject")
@click.option("--message", "-m", default="", help="Optional comment text.")
@click.option("--parent", "-p", default=None, help="Hash of the comment being rejected.")
@click.pass_context
def reject_cmd(ctx, message: str, parent: str | None):
    """Ask for changes to the open review for the current branch."""
    _post_comment(ctx, message, parent, Resolution.NEEDS_WORK)
