"""GitStore — review metadata kept in git notes of a local repository.

Every method shells out to the `git` executable. No state is cached between
calls: each listing re-reads the notes refs so that notes fetched or appended
by another process are always visible.
"""

from __future__ import annotations

import logging
import subprocess

from revnotes_store.base import BaseStore, Note
from revnotes_store.batch import (
    BATCH_CHECK_FORMAT,
    BATCH_CONTENTS_FORMAT,
    parse_batch_check,
    parse_batch_contents,
    parse_notes_list,
    split_notes,
)
from revnotes_store.errors import GitError, NotesParseError

logger = logging.getLogger(__name__)

_NOTES_REF_PREFIX = "refs/notes/"


def _ids_input(ids: list[str]) -> bytes:
    return "".join(f"{object_id}\n" for object_id in ids).encode()


def remote_notes_ref(remote: str, local_notes_ref: str) -> str:
    """Return the ref under which a remote's copy of a notes ref is fetched.

    ``refs/notes/devtools/reviews`` from ``origin`` lands in
    ``refs/notes/origin/devtools/reviews``.
    """
    relative = local_notes_ref.removeprefix(_NOTES_REF_PREFIX)
    return f"{_NOTES_REF_PREFIX}{remote}/{relative}"


class GitStore(BaseStore):
    """Annotation store backed by the git repository at ``path``."""

    def __init__(self, path: str = "."):
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def _run(self, *args: str, stdin: bytes | None = None) -> subprocess.CompletedProcess:
        logger.debug("git %s", " ".join(args))
        try:
            return subprocess.run(
                ["git", *args],
                cwd=self._path,
                input=stdin,
                capture_output=True,
            )
        except FileNotFoundError as e:
            raise GitError("The git executable could not be found.") from e

    def _git_bytes(self, *args: str, stdin: bytes | None = None) -> bytes:
        result = self._run(*args, stdin=stdin)
        if result.returncode != 0:
            stderr = result.stderr.decode(errors="replace").strip()
            raise GitError(stderr or "Error running git command: " + " ".join(args))
        return result.stdout

    def _git(self, *args: str, stdin: bytes | None = None) -> str:
        return self._git_bytes(*args, stdin=stdin).decode(errors="replace").strip()

    def get_head_ref(self) -> str:
        return self._git("symbolic-ref", "HEAD")

    def get_user_email(self) -> str:
        return self._git("config", "user.email")

    def get_commit_hash(self, ref: str) -> str:
        return self._git("show", "-s", "--format=%H", ref)

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        # Exit code 1 means "not an ancestor"; other failures (e.g. a target
        # ref that does not exist locally) are treated the same way.
        result = self._run("merge-base", "--is-ancestor", ancestor, descendant)
        if result.returncode != 0:
            logger.debug(
                "%s is not an ancestor of %s (exit %d): %s",
                ancestor,
                descendant,
                result.returncode,
                result.stderr.decode(errors="replace").strip(),
            )
        return result.returncode == 0

    def merge_base(self, a: str, b: str) -> str:
        return self._git("merge-base", a, b)

    def list_commits_between(self, start: str, end: str) -> list[str]:
        out = self._git("rev-list", "--reverse", f"{start}..{end}")
        if not out:
            return []
        return out.splitlines()

    def _list_commit_notes(self, notes_ref: str) -> list[tuple[str, str]]:
        """Return (note blob, commit) pairs for every commit annotated under the ref.

        Uses two git invocations regardless of how many objects are annotated.
        Notes attached to non-commit objects, or to objects missing from the
        local database, are dropped.
        """
        listing = self._git("notes", "--ref", notes_ref, "list")
        pairs = parse_notes_list(listing)
        if not pairs:
            return []

        object_ids = [object_id for _, object_id in pairs]
        try:
            check_output = self._git_bytes(
                "cat-file", f"--batch-check={BATCH_CHECK_FORMAT}", stdin=_ids_input(object_ids)
            )
        except GitError as e:
            raise GitError(f"Failure performing a batch file check: {e}") from e
        commits = parse_batch_check(check_output.decode(errors="replace"))
        return [(blob_id, object_id) for blob_id, object_id in pairs if object_id in commits]

    def list_noted_revisions(self, notes_ref: str) -> list[str]:
        return [object_id for _, object_id in self._list_commit_notes(notes_ref)]

    def get_notes(self, notes_ref: str, revision: str) -> list[Note]:
        result = self._run("notes", "--ref", notes_ref, "show", revision)
        if result.returncode != 0:
            # git reports a missing note as an error; that just means "no notes".
            logger.debug("No notes under %s for %s", notes_ref, revision)
            return []
        return split_notes(result.stdout.strip())

    def get_all_notes(self, notes_ref: str) -> dict[str, list[Note]]:
        """Return the notes of every annotated commit using three git invocations.

        Equivalent to calling get_notes() for each of list_noted_revisions(),
        but independent of the number of annotated commits:
          1. `git notes list` for the (blob, object) pairs,
          2. one `cat-file --batch-check` to keep only commits,
          3. one `cat-file --batch` to read every note blob.
        """
        pairs = self._list_commit_notes(notes_ref)
        if not pairs:
            return {}

        blob_ids = [blob_id for blob_id, _ in pairs]
        try:
            raw = self._git_bytes("cat-file", f"--batch={BATCH_CONTENTS_FORMAT}", stdin=_ids_input(blob_ids))
        except GitError as e:
            raise GitError(f"Failure performing a batch file read: {e}") from e
        try:
            contents = parse_batch_contents(raw)
        except NotesParseError as e:
            raise NotesParseError(f"Failure parsing the output of a batch file read: {e}") from e

        notes: dict[str, list[Note]] = {}
        for blob_id, object_id in pairs:
            notes[object_id] = split_notes(contents.get(blob_id, b""))
        logger.debug("Read notes for %d commit(s) under %s", len(notes), notes_ref)
        return notes

    def append_note(self, notes_ref: str, revision: str, note: Note) -> None:
        self._git("notes", "--ref", notes_ref, "append", "-m", note.decode(), revision)

    def push_notes(self, remote: str, notes_ref_pattern: str) -> None:
        refspec = f"{notes_ref_pattern}:{notes_ref_pattern}"
        try:
            self._git("push", remote, refspec)
        except GitError as e:
            # Usually means the user forgot to pull first.
            raise GitError(f"Failed to push to the remote '{remote}': {e}") from e

    def pull_notes(self, remote: str, notes_ref_pattern: str) -> None:
        """Fetch the remote's notes refs and merge each into its local counterpart.

        Remote notes are fetched into ``refs/notes/<remote>/...`` and merged
        with the ``cat_sort_uniq`` strategy, which suits append-only logs of
        one-line records.
        """
        fetch_refspec = f"+{notes_ref_pattern}:{remote_notes_ref(remote, notes_ref_pattern)}"
        self._git("fetch", remote, fetch_refspec)

        remote_refs = self._git("ls-remote", remote, notes_ref_pattern)
        for line in remote_refs.splitlines():
            parts = line.split("\t")
            if len(parts) != 2:
                continue
            ref = parts[1]
            self._git("notes", "--ref", ref, "merge", remote_notes_ref(remote, ref), "-s", "cat_sort_uniq")
