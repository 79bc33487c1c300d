"""Review requests and their one-line JSON note format.

A request is appended to the requests notes ref of the first commit under
review and names the ref being reviewed and the ref it should land in.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Iterable

logger = logging.getLogger(__name__)

FORMAT_VERSION = 0


@dataclass(frozen=True)
class Request:
    """A request to review ``review_ref`` for inclusion in ``target_ref``."""

    timestamp: str
    requester: str
    review_ref: str
    target_ref: str
    description: str = ""
    base_commit: str = ""
    reviewers: list[str] = field(default_factory=list)
    version: int = FORMAT_VERSION

    def to_dict(self) -> dict:
        d: dict = {
            "timestamp": self.timestamp,
            "requester": self.requester,
            "reviewRef": self.review_ref,
            "targetRef": self.target_ref,
            "v": self.version,
        }
        if self.reviewers:
            d["reviewers"] = list(self.reviewers)
        if self.base_commit:
            d["baseCommit"] = self.base_commit
        if self.description:
            d["description"] = self.description
        return d

    def to_note(self) -> bytes:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":")).encode()


def parse(note: bytes) -> Request:
    d = json.loads(note)
    if not isinstance(d, dict):
        raise ValueError(f"Request note is not a JSON object: {note!r}")
    version = d.get("v", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise ValueError(f"Unsupported request format version: {version!r}")
    reviewers = d.get("reviewers") or []
    if not isinstance(reviewers, list):
        raise ValueError(f"Invalid reviewers: {reviewers!r}")
    return Request(
        timestamp=str(d.get("timestamp", "")),
        requester=str(d.get("requester", "")),
        review_ref=str(d.get("reviewRef", "")),
        target_ref=str(d.get("targetRef", "")),
        description=str(d.get("description", "")),
        base_commit=str(d.get("baseCommit", "")),
        reviewers=[str(r) for r in reviewers],
        version=version,
    )


def parse_all_valid(notes: Iterable[bytes]) -> list[Request]:
    """Decode every well-formed request, in note order. Malformed notes are skipped."""
    requests: list[Request] = []
    for note in notes:
        if not note.strip():
            continue
        try:
            requests.append(parse(note))
        except (ValueError, TypeError) as e:
            logger.debug("Skipping malformed request note %r: %s", note, e)
    return requests
