"""Core Spec Gardener run orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from rich.console import Console

from spec_gardener_core.agents.anthropic import AnthropicAgent
from spec_gardener_core.agents.cli import ClaudeAgent, CodexAgent, GeminiAgent
from spec_gardener_core.agents.openai import OpenAIAgent
from spec_gardener_core.commands import classify_event, get_item_number, is_pull_request
from spec_gardener_core.config import get_timeout_seconds
from spec_gardener_core.context import apply_reset
from spec_gardener_core.dispatcher import Effect, dispatch
from spec_gardener_core.format import build_error_comment, build_help_comment
from spec_gardener_core.gh.items import (
    ISSUE,
    PULL_REQUEST,
    fetch_edit_history,
    fetch_issue_context,
    fetch_pull_request_context,
    get_client,
    get_issue,
    get_repo,
)
from spec_gardener_core.log_format import format_log_block, format_parsed_result
from spec_gardener_core.models import Command, RunDecision

console = Console()
logger = logging.getLogger(__name__)

_CLI_AGENTS = {
    "codex": CodexAgent,
    "claude": ClaudeAgent,
    "gemini": GeminiAgent,
}
AGENT_NAMES = (*_CLI_AGENTS, "anthropic", "openai")


@dataclass
class GardenerOutcome:
    """What a completed run did, for the CLI to report."""

    number: int
    decision: RunDecision
    effect: Optional[Effect] = None  # None for help
    parse_failed: bool = False


def get_agent(config: dict):
    name = (config.get("agent") or "").strip().lower()
    if name in _CLI_AGENTS:
        cwd = config.get("working_directory") or config.get("workspace")
        return _CLI_AGENTS[name](cwd=cwd)
    if name == "anthropic":
        if not config.get("anthropic_api_key"):
            raise ValueError("ANTHROPIC_API_KEY environment variable is not set.")
        return AnthropicAgent(api_key=config.get("anthropic_api_key"), model=config.get("model"))
    if name == "openai":
        if not config.get("openai_api_key"):
            raise ValueError("OPENAI_API_KEY environment variable is not set.")
        return OpenAIAgent(api_key=config.get("openai_api_key"), model=config.get("model"))
    raise ValueError(f"Unknown agent: {config.get('agent')!r}. Choose one of: {', '.join(AGENT_NAMES)}.")


def run_gardener(
    event_name: str,
    payload: dict,
    config: dict,
    repo_obj=None,
    client=None,
) -> GardenerOutcome | None:
    """Process one inbound event end to end.

    Returns None when the event does not warrant a run. Raises on any
    failure; the caller is responsible for notifying the item.
    """
    decision = classify_event(event_name, payload)
    if not decision.should_run:
        logger.info(decision.reason or "Skipping processing.")
        return None

    # Misconfiguration is fatal before anything is fetched.
    agent = get_agent(config)

    number = get_item_number(payload)
    if not number:
        raise ValueError("Missing issue number in event payload.")

    gh = client if client is not None else get_client(config["github_token"])
    this_repo = repo_obj if repo_obj is not None else gh.get_repo(config["repository"])
    issue = get_issue(this_repo, number)

    if decision.command is Command.HELP:
        issue.create_comment(build_help_comment())
        console.print(f"[green]Posted help on #{number}.[/green]")
        return GardenerOutcome(number=number, decision=decision)

    pull_request = is_pull_request(event_name, payload)
    context = (
        fetch_pull_request_context(this_repo, number) if pull_request else fetch_issue_context(this_repo, number)
    )
    if decision.command is Command.RESET:
        item_type = PULL_REQUEST if pull_request else ISSUE
        context = apply_reset(
            context,
            decision.command_created_at,
            lambda: fetch_edit_history(gh, this_repo.full_name, number, item_type),
        )

    prompt = agent.build_prompt(context, config.get("custom_prompt"), config.get("language"))
    logger.info(format_log_block("Prompt sent to agent", prompt))

    console.print(f"[cyan]Asking {agent.name} about #{number}...[/cyan]")
    output = agent.invoke(prompt, timeout=get_timeout_seconds(config))
    logger.info(format_log_block("Raw agent output", output))

    parsed = agent.parse_output(output)
    logger.info(format_parsed_result(parsed.result))
    if parsed.parse_failed:
        logger.error("Failed to parse agent output as JSON.")

    effect = dispatch(parsed.result, context, issue, mention_author=config.get("mention_author", True))
    console.print(f"[green]Done: {type(effect).__name__} on #{number}.[/green]")
    return GardenerOutcome(number=number, decision=decision, effect=effect, parse_failed=parsed.parse_failed)


def post_error_comment(repo_name: str, token: str, number: int, run_url: str, repo_obj=None) -> None:
    """Best-effort failure notice on the item. Never raises.

    Builds its own client unless ``repo_obj`` is given, since the failure
    being reported may have happened while creating one.
    """
    try:
        this_repo = repo_obj if repo_obj is not None else get_repo(repo_name, token=token)
        get_issue(this_repo, number).create_comment(build_error_comment(run_url))
        console.print(f"[yellow]Posted error notice on #{number}.[/yellow]")
    except Exception as e:
        logger.error("Failed to post error comment: %s", e)
