"""MemoryStore — an in-process annotation store with a toy commit graph.

No git repository required, which makes it the store of choice for tests
and for exercising review logic against hand-built histories.
"""

from __future__ import annotations

from revnotes_store.base import BaseStore, Note
from revnotes_store.errors import GitError


class MemoryStore(BaseStore):
    """Keeps notes, refs and commit parents in plain dicts.

    ``commits`` maps each commit hash to its parent hashes and ``refs`` maps
    ref names to commit hashes. Any ref or commit name accepted by git-like
    methods may be either.
    """

    def __init__(
        self,
        commits: dict[str, list[str]] | None = None,
        refs: dict[str, str] | None = None,
        head_ref: str = "refs/heads/master",
        user_email: str = "user@example.com",
    ):
        self.commits: dict[str, list[str]] = dict(commits or {})
        self.refs: dict[str, str] = dict(refs or {})
        self.head_ref = head_ref
        self.user_email = user_email
        self.notes: dict[str, dict[str, list[Note]]] = {}

    def _resolve(self, ref: str) -> str:
        if ref in self.refs:
            return self.refs[ref]
        if ref in self.commits:
            return ref
        raise GitError(f"Unknown git ref {ref!r}")

    def _ancestors(self, revision: str) -> set[str]:
        """Return every commit reachable from revision, itself included."""
        seen: set[str] = set()
        stack = [revision]
        while stack:
            commit = stack.pop()
            if commit in seen:
                continue
            seen.add(commit)
            stack.extend(self.commits.get(commit, []))
        return seen

    def get_head_ref(self) -> str:
        return self.head_ref

    def get_user_email(self) -> str:
        return self.user_email

    def get_commit_hash(self, ref: str) -> str:
        return self._resolve(ref)

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        try:
            return self._resolve(ancestor) in self._ancestors(self._resolve(descendant))
        except GitError:
            return False

    def merge_base(self, a: str, b: str) -> str:
        common = self._ancestors(self._resolve(a)) & self._ancestors(self._resolve(b))
        for commit in self._topological(self._resolve(b)):
            if commit in common:
                return commit
        raise GitError(f"No merge base for {a!r} and {b!r}")

    def _topological(self, revision: str) -> list[str]:
        """Return commits reachable from revision, newest first (parents after children)."""
        order: list[str] = []
        visited: set[str] = set()

        def visit(commit: str) -> None:
            if commit in visited:
                return
            visited.add(commit)
            for parent in self.commits.get(commit, []):
                visit(parent)
            order.append(commit)

        visit(revision)
        return list(reversed(order))

    def list_commits_between(self, start: str, end: str) -> list[str]:
        excluded = self._ancestors(self._resolve(start))
        return [c for c in reversed(self._topological(self._resolve(end))) if c not in excluded]

    def list_noted_revisions(self, notes_ref: str) -> list[str]:
        return [revision for revision in self.notes.get(notes_ref, {}) if revision in self.commits]

    def get_notes(self, notes_ref: str, revision: str) -> list[Note]:
        return list(self.notes.get(notes_ref, {}).get(revision, []))

    def get_all_notes(self, notes_ref: str) -> dict[str, list[Note]]:
        by_revision = self.notes.get(notes_ref, {})
        return {revision: list(by_revision[revision]) for revision in self.list_noted_revisions(notes_ref)}

    def append_note(self, notes_ref: str, revision: str, note: Note) -> None:
        self.notes.setdefault(notes_ref, {}).setdefault(revision, []).append(note)
