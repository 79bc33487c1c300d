"""Author resolution for new requests and comments.

Resolution order (stops at first success):
  1. ``author`` in the loaded config (set from REVNOTES_AUTHOR)
  2. `git config user.email` in the repository being reviewed
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from revnotes_store.errors import GitError

if TYPE_CHECKING:
    from revnotes_store.base import BaseStore

logger = logging.getLogger(__name__)


def resolve_author(config: dict, store: BaseStore) -> str | None:
    """Return the author to record on new notes, or None if none is configured.

    Never raises — callers should check for None and emit a UsageError.
    """
    author = config.get("author")
    if author:
        return author

    try:
        email = store.get_user_email()
    except GitError as e:
        logger.debug("Could not read user.email: %s", e)
        return None
    return email or None
