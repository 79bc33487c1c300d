"""Tests for GitStore, with git itself replaced by canned subprocess results."""

from __future__ import annotations

import subprocess

import pytest

from revnotes_store.errors import GitError, NotesParseError
from revnotes_store.git import GitStore, remote_notes_ref

REF = "refs/notes/devtools/reviews"


def _completed(stdout: bytes = b"", returncode: int = 0, stderr: bytes = b""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def _fake_git(responses: dict):
    """Return a subprocess.run replacement keyed on the first two git arguments."""

    def run(cmd, **kwargs):
        key = tuple(cmd[1:3])
        if key not in responses:
            raise AssertionError(f"unexpected git invocation: {cmd}")
        return responses[key]

    return run


def _patch_run(mocker, responses: dict):
    return mocker.patch("revnotes_store.git.subprocess.run", side_effect=_fake_git(responses))


# ---------------------------------------------------------------------------
# Bulk note retrieval
# ---------------------------------------------------------------------------


class TestGetAllNotes:
    def test_three_invocations_for_many_commits(self, mocker):
        listing = b"b1 c1\nb2 t1\nb3 c2\n"
        check = b"c1 commit\nt1 tree\nc2 commit\n"
        contents = b'b1\n15\n{"a":1}\n{"a":2}\nb3\n7\n{"b":1}\n'
        run = _patch_run(
            mocker,
            {
                ("notes", "--ref"): _completed(listing),
                ("cat-file", "--batch-check=%(objectname) %(objecttype)"): _completed(check),
                ("cat-file", "--batch=%(objectname)\n%(objectsize)"): _completed(contents),
            },
        )

        notes = GitStore("/repo").get_all_notes(REF)

        assert notes == {"c1": [b'{"a":1}', b'{"a":2}'], "c2": [b'{"b":1}']}
        assert run.call_count == 3

    def test_stdin_carries_ids(self, mocker):
        run = _patch_run(
            mocker,
            {
                ("notes", "--ref"): _completed(b"b1 c1\nb2 t1\n"),
                ("cat-file", "--batch-check=%(objectname) %(objecttype)"): _completed(b"c1 commit\nt1 tree\n"),
                ("cat-file", "--batch=%(objectname)\n%(objectsize)"): _completed(b"b1\n2\nok\n"),
            },
        )

        GitStore("/repo").get_all_notes(REF)

        check_call, read_call = run.call_args_list[1], run.call_args_list[2]
        assert check_call.kwargs["input"] == b"c1\nt1\n"
        # Only blobs annotating commits are read.
        assert read_call.kwargs["input"] == b"b1\n"
        assert read_call.kwargs["cwd"] == "/repo"

    def test_no_notes_returns_empty_mapping(self, mocker):
        run = _patch_run(mocker, {("notes", "--ref"): _completed(b"")})

        assert GitStore().get_all_notes(REF) == {}
        assert run.call_count == 1

    def test_list_failure_raises(self, mocker):
        _patch_run(mocker, {("notes", "--ref"): _completed(returncode=128, stderr=b"fatal: bad ref")})

        with pytest.raises(GitError, match="fatal: bad ref"):
            GitStore().get_all_notes(REF)

    def test_malformed_list_line_raises(self, mocker):
        _patch_run(mocker, {("notes", "--ref"): _completed(b"only-one-field\n")})

        with pytest.raises(NotesParseError):
            GitStore().get_all_notes(REF)

    def test_batch_read_failure_raises(self, mocker):
        _patch_run(
            mocker,
            {
                ("notes", "--ref"): _completed(b"b1 c1\n"),
                ("cat-file", "--batch-check=%(objectname) %(objecttype)"): _completed(b"c1 commit\n"),
                ("cat-file", "--batch=%(objectname)\n%(objectsize)"): _completed(returncode=128, stderr=b"boom"),
            },
        )

        with pytest.raises(GitError, match="batch file read"):
            GitStore().get_all_notes(REF)

    def test_truncated_contents_raise(self, mocker):
        _patch_run(
            mocker,
            {
                ("notes", "--ref"): _completed(b"b1 c1\n"),
                ("cat-file", "--batch-check=%(objectname) %(objecttype)"): _completed(b"c1 commit\n"),
                ("cat-file", "--batch=%(objectname)\n%(objectsize)"): _completed(b"b1\n99\nshort\n"),
            },
        )

        with pytest.raises(NotesParseError):
            GitStore().get_all_notes(REF)

    def test_list_noted_revisions_skips_non_commits(self, mocker):
        _patch_run(
            mocker,
            {
                ("notes", "--ref"): _completed(b"b1 c1\nb2 t1\n"),
                ("cat-file", "--batch-check=%(objectname) %(objecttype)"): _completed(b"c1 commit\nt1 tree\n"),
            },
        )

        assert GitStore().list_noted_revisions(REF) == ["c1"]


# ---------------------------------------------------------------------------
# Single-command operations
# ---------------------------------------------------------------------------


class TestGitStoreCommands:
    def test_get_notes_splits_lines(self, mocker):
        _patch_run(mocker, {("notes", "--ref"): _completed(b'{"a":1}\n{"a":2}\n')})
        assert GitStore().get_notes(REF, "c1") == [b'{"a":1}', b'{"a":2}']

    def test_get_notes_missing_is_empty(self, mocker):
        _patch_run(mocker, {("notes", "--ref"): _completed(returncode=1, stderr=b"error: no note found")})
        assert GitStore().get_notes(REF, "c1") == []

    def test_is_ancestor_true(self, mocker):
        _patch_run(mocker, {("merge-base", "--is-ancestor"): _completed()})
        assert GitStore().is_ancestor("c1", "refs/heads/master") is True

    def test_is_ancestor_false(self, mocker):
        _patch_run(mocker, {("merge-base", "--is-ancestor"): _completed(returncode=1)})
        assert GitStore().is_ancestor("c1", "refs/heads/master") is False

    def test_is_ancestor_unknown_ref_is_false(self, mocker):
        _patch_run(mocker, {("merge-base", "--is-ancestor"): _completed(returncode=128, stderr=b"fatal: Not a valid")})
        assert GitStore().is_ancestor("c1", "refs/heads/gone") is False

    def test_get_head_ref(self, mocker):
        _patch_run(mocker, {("symbolic-ref", "HEAD"): _completed(b"refs/heads/feature\n")})
        assert GitStore().get_head_ref() == "refs/heads/feature"

    def test_detached_head_raises(self, mocker):
        _patch_run(mocker, {("symbolic-ref", "HEAD"): _completed(returncode=128)})
        with pytest.raises(GitError, match="symbolic-ref HEAD"):
            GitStore().get_head_ref()

    def test_list_commits_between(self, mocker):
        run = _patch_run(mocker, {("rev-list", "--reverse"): _completed(b"c2\nc3\n")})
        assert GitStore().list_commits_between("master", "feature") == ["c2", "c3"]
        assert run.call_args.args[0][-1] == "master..feature"

    def test_list_commits_between_empty(self, mocker):
        _patch_run(mocker, {("rev-list", "--reverse"): _completed(b"")})
        assert GitStore().list_commits_between("master", "master") == []

    def test_append_note(self, mocker):
        run = _patch_run(mocker, {("notes", "--ref"): _completed()})
        GitStore().append_note(REF, "c1", b'{"a":1}')
        assert run.call_args.args[0] == ["git", "notes", "--ref", REF, "append", "-m", '{"a":1}', "c1"]

    def test_missing_git_executable(self, mocker):
        mocker.patch("revnotes_store.git.subprocess.run", side_effect=FileNotFoundError("git"))
        with pytest.raises(GitError, match="git executable"):
            GitStore().get_user_email()


class TestSync:
    def test_push_refspec(self, mocker):
        run = _patch_run(mocker, {("push", "origin"): _completed()})
        GitStore().push_notes("origin", "refs/notes/devtools/*")
        assert run.call_args.args[0] == ["git", "push", "origin", "refs/notes/devtools/*:refs/notes/devtools/*"]

    def test_push_failure_names_remote(self, mocker):
        _patch_run(mocker, {("push", "origin"): _completed(returncode=1, stderr=b"rejected")})
        with pytest.raises(GitError, match="Failed to push to the remote 'origin'"):
            GitStore().push_notes("origin", "refs/notes/devtools/*")

    def test_pull_fetches_and_merges_each_ref(self, mocker):
        ls_remote = b"abc\trefs/notes/devtools/reviews\ndef\trefs/notes/devtools/discuss\n"
        run = _patch_run(
            mocker,
            {
                ("fetch", "origin"): _completed(),
                ("ls-remote", "origin"): _completed(ls_remote),
                ("notes", "--ref"): _completed(),
            },
        )

        GitStore().pull_notes("origin", "refs/notes/devtools/*")

        commands = [c.args[0] for c in run.call_args_list]
        assert commands[0] == ["git", "fetch", "origin", "+refs/notes/devtools/*:refs/notes/origin/devtools/*"]
        assert commands[2] == [
            "git",
            "notes",
            "--ref",
            "refs/notes/devtools/reviews",
            "merge",
            "refs/notes/origin/devtools/reviews",
            "-s",
            "cat_sort_uniq",
        ]
        assert len(commands) == 4


def test_remote_notes_ref():
    assert remote_notes_ref("origin", "refs/notes/devtools/discuss") == "refs/notes/origin/devtools/discuss"
