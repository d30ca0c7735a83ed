"""Tests for configuration loading."""

import pytest

from spec_gardener_core.config import get_timeout_seconds, load_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "INPUT_AGENT",
        "INPUT_AGENT_TIMEOUT_MS",
        "INPUT_CUSTOM_PROMPT",
        "INPUT_LANGUAGE",
        "GITHUB_TOKEN",
        "GITHUB_REPOSITORY",
        "GITHUB_SERVER_URL",
        "GITHUB_RUN_ID",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["agent"] == "codex"
    assert config["agent_timeout_ms"] == 600_000
    assert config["custom_prompt"] is None
    assert config["language"] == "en"
    assert config["mention_author"] is True


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".spec-gardener.yml"
    cfg.write_text("agent: claude\nagent_timeout_ms: 1000\ncustom_prompt: Use RFC language.\n")
    config = load_config(config_path=str(cfg))
    assert config["agent"] == "claude"
    assert config["agent_timeout_ms"] == 1000
    assert config["custom_prompt"] == "Use RFC language."


def test_empty_config_file(tmp_path):
    cfg = tmp_path / ".spec-gardener.yml"
    cfg.write_text("")
    assert load_config(config_path=str(cfg))["agent"] == "codex"


def test_action_inputs_override_config_file(tmp_path, monkeypatch):
    cfg = tmp_path / ".spec-gardener.yml"
    cfg.write_text("agent: claude\n")
    monkeypatch.setenv("INPUT_AGENT", "gemini")
    monkeypatch.setenv("INPUT_CUSTOM_PROMPT", "")
    config = load_config(config_path=str(cfg))
    assert config["agent"] == "gemini"
    assert config["custom_prompt"] is None


def test_cli_overrides_win(tmp_path, monkeypatch):
    monkeypatch.setenv("INPUT_AGENT", "gemini")
    config = load_config(config_path=str(tmp_path / "none.yml"), cli_overrides={"agent": "claude"})
    assert config["agent"] == "claude"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".spec-gardener.yml"
    cfg.write_text("agent: claude\n")
    config = load_config(config_path=str(cfg), cli_overrides={"agent": None})
    assert config["agent"] == "claude"


def test_env_vars_loaded(monkeypatch, tmp_path):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    monkeypatch.setenv("GITHUB_REPOSITORY", "owner/repo")
    monkeypatch.setenv("GITHUB_RUN_ID", "42")
    config = load_config(config_path=str(tmp_path / "none.yml"))
    assert config["github_token"] == "gh-token"
    assert config["repository"] == "owner/repo"
    assert config["run_id"] == "42"
    assert config["server_url"] == "https://github.com"


def test_defaults_not_shared_between_loads(tmp_path):
    config_a = load_config(config_path=str(tmp_path / "none.yml"))
    config_a["agent"] = "claude"
    config_b = load_config(config_path=str(tmp_path / "none.yml"))
    assert config_b["agent"] == "codex"


class TestTimeoutSeconds:
    def test_converts_milliseconds(self):
        assert get_timeout_seconds({"agent_timeout_ms": 90_000}) == 90

    def test_string_value_from_action_input(self):
        assert get_timeout_seconds({"agent_timeout_ms": "1500"}) == 1.5

    def test_blank_uses_default(self):
        assert get_timeout_seconds({"agent_timeout_ms": "  "}) == 600
        assert get_timeout_seconds({}) == 600

    @pytest.mark.parametrize("raw", ["abc", "0", "-5", 0])
    def test_invalid_uses_default_with_warning(self, raw, caplog):
        assert get_timeout_seconds({"agent_timeout_ms": raw}) == 600
        assert "Invalid agent_timeout_ms" in caplog.text
