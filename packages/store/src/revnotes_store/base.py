"""Abstract annotation store interface.

Review metadata lives in an append-only log of notes attached to commits.
The core review logic depends on BaseStore, not on a concrete backend, so
the git-backed store and the in-memory store used in tests are swappable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

Note = bytes


class BaseStore(ABC):
    """Append-only per-revision note log plus the few history queries reviews need.

    Notes are grouped by a notes ref (e.g. ``refs/notes/devtools/reviews``)
    and keyed by the revision they annotate.
    """

    @abstractmethod
    def get_head_ref(self) -> str:
        """Return the ref currently checked out, e.g. ``refs/heads/feature``."""

    @abstractmethod
    def get_user_email(self) -> str:
        """Return the email address the user has configured."""

    @abstractmethod
    def get_commit_hash(self, ref: str) -> str:
        """Return the commit hash the given ref points to."""

    @abstractmethod
    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """Return True if ``ancestor`` is reachable from ``descendant``.

        A commit counts as its own ancestor.
        """

    @abstractmethod
    def merge_base(self, a: str, b: str) -> str:
        """Return the best common ancestor of two revisions."""

    @abstractmethod
    def list_commits_between(self, start: str, end: str) -> list[str]:
        """Return commits reachable from ``end`` but not ``start``, oldest first."""

    @abstractmethod
    def list_noted_revisions(self, notes_ref: str) -> list[str]:
        """Return every commit annotated under the notes ref."""

    @abstractmethod
    def get_notes(self, notes_ref: str, revision: str) -> list[Note]:
        """Return the notes for one revision, in append order.

        Returns an empty list if the revision has no notes, never raises
        for that case.
        """

    @abstractmethod
    def get_all_notes(self, notes_ref: str) -> dict[str, list[Note]]:
        """Return the notes for every annotated commit under the notes ref."""

    @abstractmethod
    def append_note(self, notes_ref: str, revision: str, note: Note) -> None:
        """Append one note to the revision's log under the notes ref."""

    def push_notes(self, remote: str, notes_ref_pattern: str) -> None:
        """Push the notes refs matching the pattern to a remote."""
        raise NotImplementedError(f"{type(self).__name__} does not support remotes")

    def pull_notes(self, remote: str, notes_ref_pattern: str) -> None:
        """Fetch the notes refs matching the pattern and merge them locally."""
        raise NotImplementedError(f"{type(self).__name__} does not support remotes")

    def close(self) -> None:
        """Release any resources held by the store.

        Optional — subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """
