"""Helpers shared by the review commands."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.text import Text

from revnotes_core.render import format_summary, format_thread, review_status

if TYPE_CHECKING:
    from revnotes_core.review import Review
    from revnotes_store.base import BaseStore

_STATUS_STYLE = {
    "accepted": "green",
    "pending": "yellow",
    "rejected": "red",
}


def get_store_and_config(ctx: click.Context) -> tuple[BaseStore, dict]:
    return ctx.obj["store"], ctx.obj["config"]


def now_timestamp() -> str:
    """Current time as epoch seconds, the timestamp format stored in notes."""
    return str(int(time.time()))


def print_summary(console: Console, review: Review) -> None:
    style = _STATUS_STYLE.get(review_status(review), "white")
    console.print(Text(format_summary(review), style=style), soft_wrap=True)


def print_details(console: Console, review: Review) -> None:
    print_summary(console, review)
    for thread in review.comments:
        for line in format_thread(thread):
            console.print(Text(line), soft_wrap=True)
