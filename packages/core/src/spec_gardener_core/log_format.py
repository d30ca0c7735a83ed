"""Formatting helpers for the run log."""

from __future__ import annotations

from spec_gardener_core.models import CliResult

LOG_PREFIX = "[Spec Gardener]"


def format_log_block(label: str, content: str) -> str:
    return f"{LOG_PREFIX} {label}:\n---\n{content}\n---"


def format_parsed_result(result: CliResult) -> str:
    return f"{LOG_PREFIX} Parsed result: {result!r}"
