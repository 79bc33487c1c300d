"""Assembling reviews from the request and comment notes in a store.

Reviews have two status fields which are orthogonal:
  1. ``resolved`` says whether reviewers accepted or rejected the change.
  2. ``submitted`` says whether the change has landed in its target ref.

Both are derived on every read; nothing here is cached or persisted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from revnotes_core import comment as comment_codec
from revnotes_core import request as request_codec
from revnotes_core.comment import Comment, Resolution
from revnotes_core.config import DEFAULT_CONFIG
from revnotes_core.request import Request
from revnotes_core.thread import CommentThread, build_threads, update_threads_status

if TYPE_CHECKING:
    from revnotes_store.base import BaseStore

logger = logging.getLogger(__name__)

REQUEST_REF = DEFAULT_CONFIG["request_ref"]
COMMENT_REF = DEFAULT_CONFIG["comment_ref"]


class AmbiguousReviewError(Exception):
    """More than one open review exists for the same ref."""

    def __init__(self, count: int, ref: str):
        self.count = count
        self.ref = ref
        super().__init__(f'There are {count} open reviews for the ref "{ref}"')


@dataclass
class Review:
    """The entire state of one code review."""

    revision: str
    request: Request
    comments: list[CommentThread] = field(default_factory=list)
    resolved: Resolution = Resolution.UNSET
    submitted: bool = False


def _build_review(store: BaseStore, revision: str, request: Request, comment_notes: list[bytes]) -> Review:
    threads = build_threads(comment_codec.parse_all_valid(comment_notes).values())
    return Review(
        revision=revision,
        request=request,
        comments=threads,
        resolved=update_threads_status(threads),
        submitted=store.is_ancestor(revision, request.target_ref),
    )


def list_all(store: BaseStore, request_ref: str = REQUEST_REF, comment_ref: str = COMMENT_REF) -> list[Review]:
    """Return every review recorded in the store, in no particular order."""
    request_notes = store.get_all_notes(request_ref)
    comment_notes = store.get_all_notes(comment_ref)

    reviews: list[Review] = []
    for revision, notes in request_notes.items():
        for request in request_codec.parse_all_valid(notes):
            reviews.append(_build_review(store, revision, request, comment_notes.get(revision, [])))
    logger.debug("Loaded %d review(s) from %d annotated commit(s)", len(reviews), len(request_notes))
    return reviews


def list_open(store: BaseStore, request_ref: str = REQUEST_REF, comment_ref: str = COMMENT_REF) -> list[Review]:
    """Return the reviews that have not yet been incorporated into their target refs."""
    return [review for review in list_all(store, request_ref, comment_ref) if not review.submitted]


def get_current(store: BaseStore, request_ref: str = REQUEST_REF, comment_ref: str = COMMENT_REF) -> Review | None:
    """Return the open review for the currently checked-out ref, or None.

    Raises AmbiguousReviewError if more than one open review matches.
    """
    review_ref = store.get_head_ref()
    matching = [r for r in list_open(store, request_ref, comment_ref) if r.request.review_ref == review_ref]
    if not matching:
        return None
    if len(matching) != 1:
        raise AmbiguousReviewError(len(matching), review_ref)
    return matching[0]


def get_review(
    store: BaseStore, revision: str, request_ref: str = REQUEST_REF, comment_ref: str = COMMENT_REF
) -> Review | None:
    """Return the review attached to ``revision`` (full hash or unique prefix), or None.

    A revision carrying several requests yields the most recent one.
    """
    candidates = [r for r in list_all(store, request_ref, comment_ref) if r.revision.startswith(revision)]
    revisions = {r.revision for r in candidates}
    if len(revisions) > 1:
        raise ValueError(f"Revision prefix {revision!r} is ambiguous: matches {len(revisions)} commits")
    if not candidates:
        return None
    return candidates[-1]


def add_request(store: BaseStore, revision: str, request: Request, request_ref: str = REQUEST_REF) -> None:
    """Append a review request to ``revision``."""
    store.append_note(request_ref, revision, request.to_note())


def add_comment(store: BaseStore, revision: str, comment: Comment, comment_ref: str = COMMENT_REF) -> str:
    """Append a comment to the review at ``revision`` and return the comment's hash."""
    store.append_note(comment_ref, revision, comment.to_note())
    return comment.hash
