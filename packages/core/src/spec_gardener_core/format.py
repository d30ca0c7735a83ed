"""Builders for every body and comment Spec Gardener writes.

Each builder appends the footer so the text can later be recognised as
machine-written.
"""

from __future__ import annotations

import re
from typing import Optional

from spec_gardener_core.constants import COMMANDS_HINT, COMMANDS_LIST, FOOTER

_WHITESPACE_RE = re.compile(r"\s+")


def build_spec_body(spec: str) -> str:
    return f"{spec}\n\n---\n{FOOTER}"


def build_comment(content: str, author_login: str, mention_author: bool = True) -> str:
    prefix = f"@{author_login} " if mention_author else ""
    return f"{prefix}{content}\n\n---\n{COMMANDS_HINT}\n{FOOTER}"


def build_help_comment() -> str:
    return f"{COMMANDS_LIST}\n\n---\n{FOOTER}"


def build_error_comment(run_url: str, author_login: Optional[str] = None, mention_author: bool = False) -> str:
    prefix = f"@{author_login} " if mention_author and author_login else ""
    return (
        f"{prefix}Spec Gardener encountered an error while processing this item.\n\n"
        f"Please check the workflow run for details:\n{run_url}\n\n---\n{COMMANDS_HINT}\n{FOOTER}"
    )


def normalize_title(title: str) -> str:
    """Collapse whitespace runs to single spaces and trim the ends."""
    return _WHITESPACE_RE.sub(" ", title).strip()
