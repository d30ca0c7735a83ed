"""Decide whether an inbound repository event should trigger a run.

Loop prevention relies only on the footer marker: a body or comment that
carries it was written by Spec Gardener, so reacting to it would make the
bot answer itself.
"""

from __future__ import annotations

from typing import Optional

from spec_gardener_core.constants import COMMAND_TOKEN, FOOTER_MARKER
from spec_gardener_core.models import Command, RunDecision

ISSUE_EVENTS = ("issues",)
PULL_REQUEST_EVENTS = ("pull_request", "pull_request_target")
COMMENT_EVENTS = ("issue_comment",)

_ITEM_ACTIONS = ("opened", "reopened", "edited")

# Longest sub-command first so "/spec-gardener reset" never reads as a bare run.
_SUBCOMMANDS = (
    ("reset", Command.RESET),
    ("help", Command.HELP),
)


def is_pull_request(event_name: str, payload: dict) -> bool:
    if event_name in PULL_REQUEST_EVENTS:
        return True
    issue = payload.get("issue") or {}
    return bool(issue.get("pull_request"))


def get_item_number(payload: dict) -> Optional[int]:
    for key in ("pull_request", "issue"):
        item = payload.get(key) or {}
        number = item.get("number")
        if number:
            return int(number)
    return None


def parse_command(text: str) -> Command:
    """Return the first command found at the start of a trimmed line."""
    for line in (text or "").splitlines():
        stripped = line.strip()
        if not stripped.startswith(COMMAND_TOKEN):
            continue
        rest = stripped[len(COMMAND_TOKEN) :]
        if rest and not rest[0].isspace():
            continue  # e.g. "/spec-gardeners"
        words = rest.split()
        if words:
            for name, command in _SUBCOMMANDS:
                if words[0] == name:
                    return command
        return Command.RUN
    return Command.NONE


def classify_event(event_name: str, payload: dict) -> RunDecision:
    action = payload.get("action", "")

    if event_name in ISSUE_EVENTS or event_name in PULL_REQUEST_EVENTS:
        item = payload.get("pull_request") if event_name in PULL_REQUEST_EVENTS else payload.get("issue")
        return _classify_item_event(event_name, action, item or {})

    if event_name in COMMENT_EVENTS:
        return _classify_comment_event(action, payload.get("comment") or {})

    return RunDecision(should_run=False, reason=f"Unsupported event: {event_name or '(none)'}.")


def _classify_item_event(event_name: str, action: str, item: dict) -> RunDecision:
    if action not in _ITEM_ACTIONS:
        return RunDecision(should_run=False, reason=f"Ignoring {event_name} action: {action or '(none)'}.")

    body = item.get("body") or ""
    if action == "edited" and FOOTER_MARKER in body:
        return RunDecision(
            should_run=False,
            reason="Body already carries the Spec Gardener footer; skipping to avoid reprocessing.",
        )
    return RunDecision(should_run=True, command=Command.RUN)


def _classify_comment_event(action: str, comment: dict) -> RunDecision:
    if action != "created":
        return RunDecision(should_run=False, reason=f"Ignoring issue_comment action: {action or '(none)'}.")

    body = comment.get("body") or ""
    if FOOTER_MARKER in body:
        return RunDecision(should_run=False, reason="Comment was written by Spec Gardener.")

    command = parse_command(body)
    if command is Command.NONE:
        return RunDecision(should_run=False, reason=f"Comment does not contain a {COMMAND_TOKEN} command.")

    if command is Command.RESET:
        return RunDecision(
            should_run=True,
            command=command,
            command_created_at=comment.get("created_at"),
        )
    return RunDecision(should_run=True, command=command)
