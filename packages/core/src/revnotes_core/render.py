"""Plain-text rendering of reviews and comment threads."""

from __future__ import annotations

from datetime import datetime, timezone

from revnotes_core.comment import Resolution
from revnotes_core.review import Review
from revnotes_core.thread import CommentThread

_REVIEW_STATUS = {
    Resolution.UNSET: "pending",
    Resolution.ACCEPTED: "accepted",
    Resolution.NEEDS_WORK: "rejected",
}

_COMMENT_STATUS = {
    Resolution.UNSET: "fyi",
    Resolution.ACCEPTED: "lgtm",
    Resolution.NEEDS_WORK: "needs work",
}


def review_status(review: Review) -> str:
    return _REVIEW_STATUS[review.resolved]


def comment_status(thread: CommentThread) -> str:
    return _COMMENT_STATUS[thread.comment.resolved]


def reformat_timestamp(timestamp: str) -> str:
    """Turn an epoch-seconds string into e.g. ``Mon Jan 02 15:04:05 UTC 2006``.

    Timestamps that are not in the expected format are returned unchanged.
    """
    try:
        seconds = int(timestamp)
        parsed = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return timestamp
    return parsed.strftime("%a %b %d %H:%M:%S %Z %Y")


def format_summary(review: Review) -> str:
    """One line: status word, revision and description."""
    return f'[{review_status(review)}] {review.revision} "{review.request.description}"'


def format_thread(thread: CommentThread, depth: int = 0) -> list[str]:
    """Render a thread depth-first, one line per comment, replies indented."""
    comment = thread.comment
    indent = "  " * (depth + 1)
    timestamp = reformat_timestamp(comment.timestamp)
    lines = [f'{indent}[{timestamp}] {comment.author} {comment_status(thread)} "{comment.description}"']
    for child in thread.children:
        lines.extend(format_thread(child, depth + 1))
    return lines


def format_details(review: Review) -> str:
    """The summary line followed by every comment thread."""
    lines = [format_summary(review)]
    for thread in review.comments:
        lines.extend(format_thread(thread))
    return "\n".join(lines)
