"""Rebuild the discussion context for a ``reset`` command.

A reset re-anchors the agent on the last description a human wrote, plus the
comments posted from the reset command onwards. The edit history of the
item is treated as an append-only log of body snapshots, oldest first;
snapshots carrying the footer marker were written by a previous run and are
skipped.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Sequence, Union

from spec_gardener_core.constants import FOOTER_MARKER
from spec_gardener_core.models import DiscussionContext

logger = logging.getLogger(__name__)

HistoryLookup = Callable[[], Sequence[Optional[str]]]

_TRAILING_RULE_RE = re.compile(r"\n---\s*$")


def strip_footer(body: str) -> str:
    """Remove the footer block (and its ``---`` separator) from a body."""
    body = body or ""
    index = body.find(FOOTER_MARKER)
    if index == -1:
        return body
    without_footer = body[:index].rstrip()
    return _TRAILING_RULE_RE.sub("", without_footer).rstrip()


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Returns None for anything that cannot be parsed.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def reconstruct_original(edit_history: Optional[Iterable[Optional[str]]], current_body_fallback: str) -> str:
    """Return the most recent human-written body, or the footer-stripped fallback."""
    if edit_history is not None:
        for snapshot in reversed(list(edit_history)):
            if isinstance(snapshot, str) and FOOTER_MARKER not in snapshot:
                return snapshot
    return strip_footer(current_body_fallback)


def apply_reset(
    context: DiscussionContext,
    reset_created_at: Optional[str],
    history_lookup: Optional[HistoryLookup] = None,
) -> DiscussionContext:
    """Return a new context anchored at the reset command.

    The comment window is inclusive: a comment posted at exactly
    ``reset_created_at`` is kept. Comments whose timestamp cannot be parsed
    are dropped.
    """
    reset_time = parse_timestamp(reset_created_at)
    if reset_time is None:
        return context

    history: Optional[Sequence[Optional[str]]] = None
    if history_lookup is not None:
        try:
            history = history_lookup()
        except Exception as e:
            # Recoverable: the current body without its footer is a usable anchor.
            logger.warning("Failed to fetch original description: %s", e)

    original = reconstruct_original(history, context.body)

    comments = []
    for comment in context.comments:
        created = parse_timestamp(comment.created_at)
        if created is not None and created >= reset_time:
            comments.append(comment)

    return dataclasses.replace(context, body=original, original_description=original, comments=comments)
