"""Review comments and their one-line JSON note format.

A comment is stored as a single line of JSON appended to the comments notes
ref of the reviewed commit::

    {"author":"a@example.com","description":"Looks good","resolved":true,"timestamp":"1500000000","v":0}

Keys with no value are omitted. A missing ``resolved`` key means the comment
is informational only. Comments are identified by the SHA-1 of their
canonical serialisation, so the same comment always has the same hash no
matter how its JSON was laid out on disk.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

FORMAT_VERSION = 0


class Resolution(Enum):
    """Tri-state verdict of a comment or of a whole thread."""

    UNSET = "unset"  # informational, no verdict
    ACCEPTED = "accepted"
    NEEDS_WORK = "needs_work"

    @classmethod
    def from_bool(cls, value: Optional[bool]) -> "Resolution":
        if value is None:
            return cls.UNSET
        return cls.ACCEPTED if value else cls.NEEDS_WORK

    def to_bool(self) -> Optional[bool]:
        if self is Resolution.UNSET:
            return None
        return self is Resolution.ACCEPTED


@dataclass(frozen=True)
class Location:
    """Where in the change a comment applies. All fields optional."""

    commit: str = ""
    path: str = ""
    start_line: int = 0

    def to_dict(self) -> dict:
        d: dict = {}
        if self.commit:
            d["commit"] = self.commit
        if self.path:
            d["path"] = self.path
        if self.start_line:
            d["range"] = {"startLine": self.start_line}
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Location":
        line_range = d.get("range") or {}
        return cls(
            commit=str(d.get("commit", "")),
            path=str(d.get("path", "")),
            start_line=int(line_range.get("startLine", 0)),
        )


@dataclass(frozen=True)
class Comment:
    """A single, immutable review comment."""

    timestamp: str
    author: str
    description: str = ""
    parent: str = ""  # hash of the comment this replies to; "" for a thread root
    resolved: Resolution = Resolution.UNSET
    location: Optional[Location] = None
    version: int = FORMAT_VERSION

    def to_dict(self) -> dict:
        d: dict = {"timestamp": self.timestamp, "author": self.author, "v": self.version}
        if self.parent:
            d["parent"] = self.parent
        if self.location is not None and self.location.to_dict():
            d["location"] = self.location.to_dict()
        if self.description:
            d["description"] = self.description
        if self.resolved is not Resolution.UNSET:
            d["resolved"] = self.resolved.to_bool()
        return d

    def to_note(self) -> bytes:
        """Serialise to the canonical one-line JSON note."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":")).encode()

    @property
    def hash(self) -> str:
        return hashlib.sha1(self.to_note()).hexdigest()


def parse(note: bytes) -> Comment:
    """Decode one note into a Comment.

    Raises ValueError (json.JSONDecodeError included) if the note is not a
    comment this version understands.
    """
    d = json.loads(note)
    if not isinstance(d, dict):
        raise ValueError(f"Comment note is not a JSON object: {note!r}")
    version = d.get("v", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise ValueError(f"Unsupported comment format version: {version!r}")
    resolved = d.get("resolved")
    if resolved is not None and not isinstance(resolved, bool):
        raise ValueError(f"Invalid resolved value: {resolved!r}")
    location = d.get("location")
    if location is not None and not isinstance(location, dict):
        raise ValueError(f"Invalid location: {location!r}")
    return Comment(
        timestamp=str(d.get("timestamp", "")),
        author=str(d.get("author", "")),
        description=str(d.get("description", "")),
        parent=str(d.get("parent", "")),
        resolved=Resolution.from_bool(resolved),
        location=Location.from_dict(location) if location is not None else None,
        version=version,
    )


def parse_all_valid(notes: Iterable[bytes]) -> dict[str, Comment]:
    """Decode every well-formed comment, keyed by hash. Malformed notes are skipped."""
    comments: dict[str, Comment] = {}
    for note in notes:
        if not note.strip():
            continue
        try:
            comment = parse(note)
        except (ValueError, TypeError, AttributeError) as e:
            logger.debug("Skipping malformed comment note %r: %s", note, e)
            continue
        comments[comment.hash] = comment
    return comments
