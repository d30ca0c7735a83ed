"""Tests for agent adapters and the subprocess runner.

Shared behaviour (prompt building, parsing, timeout normalisation) lives in
BaseAgent and is tested once through a stub. The runner tests start real
Python subprocesses so the timeout and exit-code paths are exercised for
real.
"""

import sys
import time
from unittest.mock import MagicMock, patch

import pytest

from spec_gardener_core.agents.anthropic import AnthropicAgent
from spec_gardener_core.agents.base import AgentExitError, AgentTimeoutError, BaseAgent
from spec_gardener_core.agents.cli import ClaudeAgent, CodexAgent, GeminiAgent
from spec_gardener_core.agents.openai import OpenAIAgent
from spec_gardener_core.agents.runner import run_agent_process
from spec_gardener_core.models import DiscussionContext, NoChange


class _StubAgent(BaseAgent):
    name = "stub"

    def __init__(self, reply='{"type":"no_change"}'):
        self.reply = reply
        self.calls = []

    def _call(self, prompt, timeout):
        self.calls.append((prompt, timeout))
        return self.reply


# ---------------------------------------------------------------------------
# BaseAgent
# ---------------------------------------------------------------------------


class TestBaseAgent:
    def test_invoke_passes_prompt_and_timeout(self):
        agent = _StubAgent()
        assert agent.invoke("prompt", timeout=30) == '{"type":"no_change"}'
        assert agent.calls == [("prompt", 30)]

    def test_non_positive_timeout_means_unbounded(self):
        agent = _StubAgent()
        agent.invoke("prompt", timeout=0)
        assert agent.calls == [("prompt", None)]

    def test_none_reply_becomes_empty_string(self):
        assert _StubAgent(reply=None).invoke("p") == ""

    def test_parse_output(self):
        assert _StubAgent().parse_output('{"type":"no_change"}').result == NoChange()

    def test_build_prompt_uses_context(self):
        context = DiscussionContext(title="Dark mode", body="Add it", author="bob")
        prompt = _StubAgent().build_prompt(context, "Be brief.")
        assert "Dark mode" in prompt
        assert "Be brief." in prompt


# ---------------------------------------------------------------------------
# run_agent_process
# ---------------------------------------------------------------------------


def _python(code):
    return sys.executable, ["-c", code]


class TestRunAgentProcess:
    def test_returns_stdout_and_passes_prompt_last(self):
        cmd, args = _python("import sys; print(sys.argv[-1].upper())")
        assert run_agent_process(cmd, args, "hello", timeout=30).strip() == "HELLO"

    def test_non_zero_exit_raises_with_stderr(self):
        cmd, args = _python("import sys; sys.stderr.write('boom'); sys.exit(3)")
        with pytest.raises(AgentExitError) as exc_info:
            run_agent_process(cmd, args, "p", timeout=30)
        assert exc_info.value.returncode == 3
        assert "boom" in str(exc_info.value)

    def test_timeout_kills_process(self):
        cmd, args = _python("import sys, time; sys.stderr.write('started'); sys.stderr.flush(); time.sleep(30)")
        start = time.monotonic()
        with pytest.raises(AgentTimeoutError) as exc_info:
            run_agent_process(cmd, args, "p", timeout=2)
        assert time.monotonic() - start < 20
        assert exc_info.value.timeout == 2
        assert "started" in exc_info.value.stderr

    @pytest.mark.skipif(sys.platform == "win32", reason="process groups are POSIX only")
    def test_timeout_kills_background_children(self):
        # The backgrounded sleep inherits stdout and stderr; only killing the
        # whole group lets the pipes close in time.
        start = time.monotonic()
        with pytest.raises(AgentTimeoutError):
            run_agent_process("sh", ["-c", "sleep 30 & sleep 30"], "prompt", timeout=1)
        assert time.monotonic() - start < 4

    def test_timeout_is_distinct_from_exit_failure(self):
        assert not issubclass(AgentTimeoutError, AgentExitError)
        assert not issubclass(AgentExitError, AgentTimeoutError)

    def test_missing_command(self):
        with pytest.raises(AgentExitError):
            run_agent_process("definitely-not-a-real-agent-binary", [], "p", timeout=5)

    def test_stderr_on_success_is_logged(self, caplog):
        cmd, args = _python("import sys; sys.stderr.write('warming up'); print('ok')")
        with caplog.at_level("INFO"):
            assert run_agent_process(cmd, args, "p", timeout=30).strip() == "ok"
        assert "warming up" in caplog.text

    def test_large_output_is_fully_drained(self):
        cmd, args = _python("import sys; sys.stdout.write('x' * 200000); sys.stderr.write('y' * 200000)")
        assert len(run_agent_process(cmd, args, "p", timeout=30)) == 200000

    def test_runs_in_cwd(self, tmp_path):
        cmd, args = _python("import os; print(os.getcwd())")
        out = run_agent_process(cmd, args, "p", timeout=30, cwd=str(tmp_path))
        assert out.strip() == str(tmp_path.resolve())


# ---------------------------------------------------------------------------
# CLI agents
# ---------------------------------------------------------------------------


class TestCliAgents:
    @pytest.mark.parametrize(
        "agent_cls, command, args",
        [
            (CodexAgent, "codex", ["exec"]),
            (ClaudeAgent, "claude", ["-p"]),
            (GeminiAgent, "gemini", ["-p"]),
        ],
    )
    def test_build_command(self, agent_cls, command, args):
        assert agent_cls(cwd="/tmp").build_command() == (command, args)

    def test_call_delegates_to_runner(self, mocker):
        mock_run = mocker.patch("spec_gardener_core.agents.cli.run_agent_process", return_value="out")
        agent = CodexAgent(cwd="/work")
        assert agent.invoke("the prompt", timeout=12) == "out"
        mock_run.assert_called_once_with("codex", ["exec"], "the prompt", timeout=12, cwd="/work")

    def test_cwd_defaults_to_workspace(self, monkeypatch):
        monkeypatch.setenv("GITHUB_WORKSPACE", "/github/workspace")
        assert ClaudeAgent().cwd == "/github/workspace"


# ---------------------------------------------------------------------------
# API agents: only the SDK wiring differs per agent
# ---------------------------------------------------------------------------


class TestAnthropicAgent:
    def _agent(self):
        with patch("anthropic.Anthropic") as mock_cls:
            agent = AnthropicAgent(api_key="test-key")
        return agent, mock_cls

    def test_sends_prompt_with_timeout(self):
        from anthropic.types import TextBlock

        agent, _ = self._agent()
        block = MagicMock(spec=TextBlock)
        block.text = '{"type":"no_change"}'
        agent.client.messages.create.return_value = MagicMock(content=[block])

        assert agent.invoke("prompt", timeout=60) == '{"type":"no_change"}'
        kwargs = agent.client.messages.create.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
        assert kwargs["timeout"] == 60
        assert kwargs["model"] == AnthropicAgent.MODEL

    def test_timeout_mapped(self):
        import anthropic
        import httpx

        agent, _ = self._agent()
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        agent.client.messages.create.side_effect = anthropic.APITimeoutError(request=request)
        with pytest.raises(AgentTimeoutError):
            agent.invoke("prompt", timeout=5)

    def test_api_error_mapped(self):
        import anthropic
        import httpx

        agent, _ = self._agent()
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        agent.client.messages.create.side_effect = anthropic.APIConnectionError(request=request)
        with pytest.raises(AgentExitError):
            agent.invoke("prompt", timeout=5)

    def test_custom_model(self):
        with patch("anthropic.Anthropic"):
            agent = AnthropicAgent(api_key="k", model="claude-opus-4-1")
        assert agent.model == "claude-opus-4-1"


class TestOpenAIAgent:
    def _agent(self):
        with patch("openai.OpenAI"):
            return OpenAIAgent(api_key="test-key")

    def test_sends_prompt_with_timeout(self):
        agent = self._agent()
        choice = MagicMock()
        choice.message.content = '{"type":"no_change"}'
        agent.client.chat.completions.create.return_value = MagicMock(choices=[choice])

        assert agent.invoke("prompt", timeout=60) == '{"type":"no_change"}'
        kwargs = agent.client.chat.completions.create.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
        assert kwargs["timeout"] == 60

    def test_timeout_mapped(self):
        import httpx
        import openai

        agent = self._agent()
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        agent.client.chat.completions.create.side_effect = openai.APITimeoutError(request=request)
        with pytest.raises(AgentTimeoutError):
            agent.invoke("prompt", timeout=5)

    def test_missing_package_raises_import_error(self, monkeypatch):
        import spec_gardener_core.agents.openai as module

        monkeypatch.setattr(module, "_openai", None)
        with pytest.raises(ImportError):
            OpenAIAgent(api_key="k")
