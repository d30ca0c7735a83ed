"""run command: process one GitHub event."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
from rich.console import Console

from spec_gardener_core.commands import get_item_number
from spec_gardener_core.gardener import post_error_comment, run_gardener
from spec_gardener_core.gh.items import build_run_url

console = Console()
logger = logging.getLogger(__name__)


def _load_event(event_path: str) -> dict:
    path = Path(event_path)
    if not path.exists():
        raise click.UsageError(f"Event payload not found: {event_path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.UsageError(f"Event payload is not valid JSON: {e}")
    if not isinstance(payload, dict):
        raise click.UsageError("Event payload must be a JSON object.")
    return payload


@click.command("run")
@click.option(
    "--event-name",
    envvar="GITHUB_EVENT_NAME",
    default=None,
    help="GitHub event name, e.g. issues or issue_comment. Defaults to $GITHUB_EVENT_NAME.",
)
@click.option(
    "--event-path",
    envvar="GITHUB_EVENT_PATH",
    default=None,
    help="Path to the event payload JSON. Defaults to $GITHUB_EVENT_PATH.",
)
@click.option("--repo", default=None, help="GitHub repository in owner/name format. Defaults to $GITHUB_REPOSITORY.")
@click.option("--agent", default=None, help="Agent to use (codex, claude, gemini, anthropic, openai). Overrides config.")
@click.option("--timeout-ms", "timeout_ms", type=int, default=None, help="Agent timeout in milliseconds.")
@click.pass_context
def run_cmd(ctx, event_name: str | None, event_path: str | None, repo: str | None, agent: str | None, timeout_ms):
    """Process one issue, pull request, or comment event.

    \b
    Environment variables:
      GITHUB_TOKEN         GitHub token (or INPUT_GITHUB_TOKEN, or gh CLI)
      GITHUB_EVENT_NAME    Event name, set by GitHub Actions
      GITHUB_EVENT_PATH    Event payload path, set by GitHub Actions
      ANTHROPIC_API_KEY    Required when the anthropic agent runs
      OPENAI_API_KEY       Required when the openai agent runs
    """
    from spec_gardener_cli.auth import resolve_github_token
    from spec_gardener_core.config import load_config

    config_path = ctx.obj.get("config_path", ".spec-gardener.yml") if ctx.obj else ".spec-gardener.yml"
    config = load_config(config_path, cli_overrides={"agent": agent, "agent_timeout_ms": timeout_ms})
    if repo:
        config["repository"] = repo

    if not event_name or not event_path:
        raise click.UsageError("No event to process. Set --event-name and --event-path (or run inside GitHub Actions).")
    if not config.get("repository"):
        raise click.UsageError("Unable to resolve repository owner/name. Pass --repo or set GITHUB_REPOSITORY.")

    token = resolve_github_token()
    if not token:
        raise click.UsageError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")
    config["github_token"] = token

    payload = _load_event(event_path)

    try:
        outcome = run_gardener(event_name, payload, config)
    except Exception as e:
        logger.exception("Spec Gardener run failed.")
        number = get_item_number(payload)
        if number:
            post_error_comment(config["repository"], token, number, build_run_url(config))
        raise click.ClickException(str(e))

    if outcome is None:
        console.print("[yellow]Nothing to do for this event.[/yellow]")
    elif outcome.parse_failed:
        console.print("[yellow]Agent reply was not structured; it was posted as a question.[/yellow]")
