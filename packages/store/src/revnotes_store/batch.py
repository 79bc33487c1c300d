"""Parsers for the output of batch git commands used by bulk note retrieval.

Reading every note under a notes ref one revision at a time costs one git
process per annotated commit. With tens of thousands of reviews that is far
too slow, so GitStore.get_all_notes() instead runs exactly three commands:

  1. `git notes --ref <ref> list`            → parse_notes_list()
  2. `git cat-file --batch-check=<format>`   → parse_batch_check()
  3. `git cat-file --batch=<format>`         → parse_batch_contents()

The functions here are pure so they can be tested without a repository.
"""

from __future__ import annotations

from revnotes_store.errors import NotesParseError

BATCH_CHECK_FORMAT = "%(objectname) %(objecttype)"
BATCH_CONTENTS_FORMAT = "%(objectname)\n%(objectsize)"


def parse_notes_list(output: str) -> list[tuple[str, str]]:
    """Parse `git notes list` output into (note blob, annotated object) pairs."""
    pairs: list[tuple[str, str]] = []
    for line in output.splitlines():
        if not line:
            continue
        parts = line.split(" ")
        if len(parts) != 2:
            raise NotesParseError(f"Malformed output line from 'git notes list': {line!r}")
        pairs.append((parts[0], parts[1]))
    return pairs


def parse_batch_check(output: str) -> set[str]:
    """Return the ids reported as commits by `git cat-file --batch-check`.

    Each line is `<id> <type>`. Objects of any other type (blob, tree, tag,
    or `missing` for objects not in the local database) are left out.
    """
    commits: set[str] = set()
    for line in output.splitlines():
        if not line:
            continue
        name, sep, object_type = line.partition(" ")
        if not sep:
            raise NotesParseError(f"Malformed output line from a batch file check: {line!r}")
        if object_type == "commit":
            commits.add(name)
    return commits


def parse_batch_contents(output: bytes) -> dict[str, bytes]:
    """Parse `git cat-file --batch` output into a mapping of id → raw contents.

    Entries are `<id>\\n<size>\\n<size bytes of content>` followed by one or
    more newlines. Note contents routinely contain newlines themselves, so the
    content is read by its declared size rather than split on a terminator.
    """
    contents: dict[str, bytes] = {}
    pos = 0
    end = len(output)
    while pos < end:
        name_end = output.find(b"\n", pos)
        if name_end == -1:
            raise NotesParseError(f"Truncated object name in batch file read: {output[pos:]!r}")
        name = output[pos:name_end].decode()
        pos = name_end + 1

        size_end = output.find(b"\n", pos)
        if size_end == -1:
            raise NotesParseError(f"Missing object size in batch file read: {name!r}")
        size_field = output[pos:size_end]
        if not size_field.isdigit():
            raise NotesParseError(f"Failure while parsing the next object size: {name!r} - {size_field!r}")
        size = int(size_field)
        pos = size_end + 1

        if pos + size > end:
            raise NotesParseError(
                f"Object {name!r} declares {size} bytes but only {end - pos} remain in the batch file read"
            )
        contents[name] = output[pos : pos + size]
        pos += size

        while pos < end and output[pos : pos + 1] == b"\n":
            pos += 1
    return contents


def split_notes(contents: bytes) -> list[bytes]:
    """Split a notes blob into its individual records, one per line."""
    return contents.split(b"\n")
