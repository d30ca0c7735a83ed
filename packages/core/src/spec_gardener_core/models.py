"""Data model for a single Spec Gardener run.

Every value here is built fresh from the inbound event and the remote item,
and discarded when the run ends. Nothing is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Union

from spec_gardener_core.constants import DEFAULT_COMPLETION_COMMENT


@dataclass(frozen=True)
class Comment:
    author: str
    body: str
    created_at: str  # ISO-8601 as returned by the host


@dataclass(frozen=True)
class ChangedFile:
    filename: str
    status: str  # "added" | "modified" | "removed" | "renamed" | ...
    additions: int = 0
    deletions: int = 0
    changes: int = 0


@dataclass(frozen=True)
class DiscussionContext:
    """Everything the agent sees about one issue or pull request.

    ``changed_files`` is None for issues and a (possibly empty) list for pull
    requests. ``original_description`` is only set after a reset.
    """

    title: str
    body: str
    author: str
    comments: list[Comment] = field(default_factory=list)
    changed_files: Optional[list[ChangedFile]] = None
    original_description: Optional[str] = None


# ---------------------------------------------------------------------- #
# Agent results: a closed set of three variants                          #
# ---------------------------------------------------------------------- #


@dataclass(frozen=True)
class Question:
    """The agent needs more input before it can refine the spec."""

    type: ClassVar[str] = "question"
    content: str


@dataclass(frozen=True)
class Complete:
    """The agent produced a refined specification."""

    type: ClassVar[str] = "complete"
    body: str
    comment: str = DEFAULT_COMPLETION_COMMENT
    title: Optional[str] = None


@dataclass(frozen=True)
class NoChange:
    """The agent judged the current specification sufficient."""

    type: ClassVar[str] = "no_change"


CliResult = Union[Question, Complete, NoChange]


@dataclass(frozen=True)
class ParseResult:
    result: CliResult
    # True when ``result`` is a best-effort fallback rather than a structured reply.
    parse_failed: bool = False


class Command(str, Enum):
    NONE = "none"
    HELP = "help"
    RUN = "run"
    RESET = "reset"


@dataclass(frozen=True)
class RunDecision:
    should_run: bool
    command: Command = Command.NONE
    reason: Optional[str] = None
    command_created_at: Optional[str] = None  # only meaningful for RESET
