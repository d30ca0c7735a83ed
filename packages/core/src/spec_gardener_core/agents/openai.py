from __future__ import annotations

from typing import Optional

try:
    import openai as _openai
except ImportError:
    _openai = None  # type: ignore[assignment]

from spec_gardener_core.agents.base import AgentExitError, AgentTimeoutError, BaseAgent


class OpenAIAgent(BaseAgent):
    """Calls the OpenAI Chat Completions API directly instead of a local CLI."""

    name = "openai"
    MODEL = "gpt-4o"
    TEMPERATURE = 0.2
    MAX_TOKENS = 8192

    def __init__(self, api_key: str, model: Optional[str] = None):
        if _openai is None:
            raise ImportError(
                "The 'openai' package is required for this agent. "
                "Install it with: pip install 'spec-gardener[openai]'"
            )
        self.client = _openai.OpenAI(api_key=api_key)
        self.model = model or self.MODEL

    def _call(self, prompt: str, timeout: Optional[float]) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.TEMPERATURE,
                max_tokens=self.MAX_TOKENS,
                timeout=timeout,
            )
        except _openai.APITimeoutError as e:
            raise AgentTimeoutError(timeout or 0) from e
        except _openai.OpenAIError as e:
            raise AgentExitError(getattr(e, "status_code", None), str(e)) from e
        return response.choices[0].message.content or ""
