"""Comment threads: rebuilding the reply tree and aggregating its verdicts.

Comments are stored as a flat log; each names its parent by hash. Threads
are rebuilt from that log on every read and never persisted.

The ``resolved`` field of a thread is the aggregate status of its subtree:

- NEEDS_WORK: some comment in the thread is unaddressed.
- UNSET: nothing is unaddressed, but the root comment is FYI only (or did
  not itself accept the change).
- ACCEPTED: nothing is unaddressed and the root comment accepts the change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from revnotes_core.comment import Comment, Resolution

logger = logging.getLogger(__name__)


@dataclass
class CommentThread:
    """A comment plus its replies, oldest first once resolved."""

    comment: Comment
    children: list[CommentThread] = field(default_factory=list)
    resolved: Resolution = Resolution.UNSET


def build_threads(comments: Iterable[Comment]) -> list[CommentThread]:
    """Build the forest of comment threads from a flat collection of comments.

    Comments whose parent is not among ``comments`` are dropped, along with
    their replies. If two comments share a hash the later one wins.
    """
    threads_by_hash: dict[str, CommentThread] = {}
    for comment in comments:
        threads_by_hash[comment.hash] = CommentThread(comment=comment)

    roots: list[CommentThread] = []
    for comment_hash, thread in threads_by_hash.items():
        parent_hash = thread.comment.parent
        if not parent_hash:
            roots.append(thread)
            continue
        parent = threads_by_hash.get(parent_hash)
        if parent is None:
            logger.debug("Dropping comment %s: parent %s not found", comment_hash, parent_hash)
            continue
        parent.children.append(thread)
    return roots


def _timestamp_key(thread: CommentThread) -> tuple:
    timestamp = thread.comment.timestamp
    if timestamp.isdigit():
        return (0, int(timestamp), "")
    return (1, 0, timestamp)


def aggregate(statuses: Iterable[Resolution]) -> Resolution:
    """Conjunction of the statuses that are set; UNSET if none are."""
    all_accepted = True
    any_set = False
    for status in statuses:
        if status is Resolution.UNSET:
            continue
        any_set = True
        all_accepted = all_accepted and status is Resolution.ACCEPTED
    if not any_set:
        return Resolution.UNSET
    return Resolution.ACCEPTED if all_accepted else Resolution.NEEDS_WORK


def update_threads_status(threads: list[CommentThread]) -> Resolution:
    """Resolve every thread in ``threads`` and return their aggregate status.

    Sorts ``threads`` in place by timestamp (stable, so ties keep their
    order) and, as a side effect, sets ``resolved`` on every descendant.
    """
    threads.sort(key=_timestamp_key)
    for thread in threads:
        update_resolved_status(thread)
    return aggregate(thread.resolved for thread in threads)


def update_resolved_status(thread: CommentThread) -> None:
    """Compute ``thread.resolved`` from its own comment and its replies."""
    children_status = update_threads_status(thread.children)
    own = thread.comment.resolved

    if children_status is Resolution.UNSET:
        thread.resolved = own
    elif children_status is Resolution.NEEDS_WORK:
        thread.resolved = Resolution.NEEDS_WORK
    elif own is Resolution.ACCEPTED:
        thread.resolved = Resolution.ACCEPTED
    else:
        # Replies are all fine, but this comment never accepted the change.
        thread.resolved = Resolution.UNSET
