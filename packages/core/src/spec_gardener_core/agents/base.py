"""Base agent implementing the Template Method pattern.

Every agent shares the same exchange:
    build_prompt() → invoke() → _call()   ← only this differs per agent
                   → parse_output()

Subclasses implement ``_call`` only: hand one prompt string to the agent and
return its complete text reply, raising ``AgentTimeoutError`` when the
timeout elapses and ``AgentExitError`` for any other failure. There is no
retry: a failed call aborts the run.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from spec_gardener_core.agents.parser import parse_cli_output
from spec_gardener_core.models import DiscussionContext, ParseResult
from spec_gardener_core.prompts import build_prompt

logger = logging.getLogger(__name__)


class AgentError(RuntimeError):
    """The agent call did not produce a reply."""


class AgentTimeoutError(AgentError):
    def __init__(self, timeout: float, stderr: str = ""):
        self.timeout = timeout
        self.stderr = stderr
        message = f"Agent timed out after {timeout:g}s."
        if stderr.strip():
            message += f" stderr: {stderr.strip()}"
        super().__init__(message)


class AgentExitError(AgentError):
    def __init__(self, returncode: Optional[int], stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        if returncode is None:
            message = f"Agent call failed: {stderr}"
        else:
            message = f"Agent exited with code {returncode}: {stderr}"
        super().__init__(message)


class BaseAgent(ABC):
    name: str = "base"

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def build_prompt(
        self,
        context: DiscussionContext,
        custom_prompt: Optional[str] = None,
        language: Optional[str] = None,
    ) -> str:
        return build_prompt(context, custom_prompt, language)

    def invoke(self, prompt: str, timeout: Optional[float] = None) -> str:
        """Send ``prompt`` and return the complete raw reply.

        A ``timeout`` of None or <= 0 waits indefinitely.
        """
        if timeout is not None and timeout <= 0:
            timeout = None
        logger.debug("Invoking %s agent (timeout: %s).", self.name, timeout)
        return self._call(prompt, timeout) or ""

    def parse_output(self, output: str) -> ParseResult:
        return parse_cli_output(output)

    # ------------------------------------------------------------------ #
    # Abstract - implement in each agent                                  #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call(self, prompt: str, timeout: Optional[float]) -> str:
        """Make a single agent call and return its text output."""
