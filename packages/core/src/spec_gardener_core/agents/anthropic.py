from __future__ import annotations

from typing import Optional

from spec_gardener_core.agents.base import AgentExitError, AgentTimeoutError, BaseAgent


class AnthropicAgent(BaseAgent):
    """Calls the Anthropic Messages API directly instead of a local CLI.

    Useful in workflows where installing an agent CLI is not an option. The
    agent sees only the prompt, not the checked-out codebase.
    """

    name = "anthropic"
    MODEL = "claude-sonnet-4-20250514"
    TEMPERATURE = 0.3
    MAX_TOKENS = 8192

    def __init__(self, api_key: str, model: Optional[str] = None):
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this agent. "
                "Install it with: pip install 'spec-gardener[anthropic]'"
            )
        self.client = Anthropic(api_key=api_key)
        self.model = model or self.MODEL

    def _call(self, prompt: str, timeout: Optional[float]) -> str:
        # Imported inside the method because the anthropic package is optional;
        # __init__ already validated it is installed before we reach here.
        import anthropic
        from anthropic.types import TextBlock

        try:
            response = self.client.messages.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.TEMPERATURE,
                max_tokens=self.MAX_TOKENS,
                timeout=timeout,
            )
        except anthropic.APITimeoutError as e:
            raise AgentTimeoutError(timeout or 0) from e
        except anthropic.APIError as e:
            raise AgentExitError(getattr(e, "status_code", None), str(e)) from e

        text_blocks = [block.text for block in response.content if isinstance(block, TextBlock)]
        return "".join(text_blocks).strip()
