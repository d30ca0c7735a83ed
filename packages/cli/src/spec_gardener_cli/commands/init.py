"""init command: write .spec-gardener.yml and a GitHub Actions workflow."""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

console = Console()

# agent → (pip extra, agent CLI install command, secret the agent needs)
_AGENT_SETUP = {
    "codex": ("", "npm install -g @openai/codex", "OPENAI_API_KEY"),
    "claude": ("", "npm install -g @anthropic-ai/claude-code", "ANTHROPIC_API_KEY"),
    "gemini": ("", "npm install -g @google/gemini-cli", "GEMINI_API_KEY"),
    "anthropic": ("[anthropic]", "", "ANTHROPIC_API_KEY"),
    "openai": ("[openai]", "", "OPENAI_API_KEY"),
}

_WORKFLOW_TEMPLATE = """\
name: Spec Gardener

on:
  issues:
    types: [opened, edited, reopened]
  pull_request:
    types: [opened, edited, reopened]
  issue_comment:
    types: [created]

jobs:
  garden:
    runs-on: ubuntu-latest
    permissions:
      contents: read
      issues: write
      pull-requests: write

    steps:
      - uses: actions/checkout@v4

      - name: Set up Python
        uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      - name: Install spec-gardener
        run: pip install "spec-gardener{extra}=={version}"
{agent_install}
      - name: Run Spec Gardener
        env:
          GITHUB_TOKEN: ${{{{ secrets.GITHUB_TOKEN }}}}
          {api_key_env}: ${{{{ secrets.{api_key_env} }}}}
        run: spec-gardener run --agent {agent}
"""

_AGENT_INSTALL_STEP = """
      - name: Install agent CLI
        run: {command}
"""


@click.command("init")
@click.option(
    "--agent",
    type=click.Choice(sorted(_AGENT_SETUP)),
    default=None,
    help="Agent to configure. Prompted for when omitted.",
)
@click.option("--yes", "-y", is_flag=True, help="Write the workflow without asking.")
@click.pass_context
def init_cmd(ctx, agent: str | None, yes: bool):
    """Set up Spec Gardener for this repository.

    Writes the configuration file and, optionally, a GitHub Actions workflow
    that runs on new and edited issues and pull requests and on comments.
    """
    config_path = Path(ctx.obj.get("config_path", ".spec-gardener.yml") if ctx.obj else ".spec-gardener.yml")

    if agent is None:
        agent = click.prompt("Agent", type=click.Choice(sorted(_AGENT_SETUP)), default="codex")

    _write_config(config_path, {"agent": agent})
    console.print(f"[green]Wrote {config_path}[/green]")

    extra, install_command, api_key_env = _AGENT_SETUP[agent]
    if yes or click.confirm("\nGenerate .github/workflows/spec-gardener.yml?", default=True):
        workflow_path = _write_workflow(agent, extra, install_command, api_key_env)
        console.print(f"[green]Created {workflow_path}[/green]")
        console.print(
            f"\n[yellow]Remember to add [bold]{api_key_env}[/bold] to your "
            "GitHub repository secrets (Settings → Secrets → Actions).[/yellow]"
        )

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Comment [bold]/spec-gardener help[/bold] on any issue to see the available commands.")


def _write_config(path: Path, config: dict) -> None:
    """Write or update the config file, preserving any existing keys."""
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))


def _get_version() -> str:
    try:
        from importlib.metadata import version

        return version("spec-gardener")
    except Exception:
        return "0.1.0"


def _write_workflow(agent: str, extra: str, install_command: str, api_key_env: str) -> Path:
    workflow_dir = Path(".github/workflows")
    workflow_dir.mkdir(parents=True, exist_ok=True)
    workflow_path = workflow_dir / "spec-gardener.yml"
    agent_install = _AGENT_INSTALL_STEP.format(command=install_command) if install_command else ""
    workflow_path.write_text(
        _WORKFLOW_TEMPLATE.format(
            agent=agent,
            extra=extra,
            version=_get_version(),
            agent_install=agent_install,
            api_key_env=api_key_env,
        )
    )
    return workflow_path
