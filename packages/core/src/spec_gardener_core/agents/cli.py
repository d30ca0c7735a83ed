"""Agents driven through their command-line tools.

Each CLI receives the prompt as its final argument and prints its reply on
stdout. The agent runs inside the checked-out repository so it can read the
codebase it is specifying against.
"""

from __future__ import annotations

import os
from typing import Optional

from spec_gardener_core.agents.base import BaseAgent
from spec_gardener_core.agents.runner import run_agent_process


class CliAgent(BaseAgent):
    COMMAND: str = ""
    ARGS: tuple[str, ...] = ()

    def __init__(self, cwd: Optional[str] = None):
        self.cwd = cwd or os.environ.get("GITHUB_WORKSPACE") or os.getcwd()

    def build_command(self) -> tuple[str, list[str]]:
        return self.COMMAND, list(self.ARGS)

    def _call(self, prompt: str, timeout: Optional[float]) -> str:
        command, args = self.build_command()
        return run_agent_process(command, args, prompt, timeout=timeout, cwd=self.cwd)


class CodexAgent(CliAgent):
    name = "codex"
    COMMAND = "codex"
    ARGS = ("exec",)


class ClaudeAgent(CliAgent):
    name = "claude"
    COMMAND = "claude"
    ARGS = ("-p",)


class GeminiAgent(CliAgent):
    name = "gemini"
    COMMAND = "gemini"
    ARGS = ("-p",)
