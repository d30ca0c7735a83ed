import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from spec_gardener_core.constants import DEFAULT_AGENT_TIMEOUT_MS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict = {
    "agent": "codex",
    "agent_timeout_ms": DEFAULT_AGENT_TIMEOUT_MS,
    "custom_prompt": None,
    "language": "en",
    "mention_author": True,
    "working_directory": None,  # None = GITHUB_WORKSPACE, else the current directory
    "model": None,  # None = the agent's default model (API agents only)
}

# GitHub Action inputs arrive as INPUT_<NAME> environment variables.
_ACTION_INPUTS = {
    "agent": "INPUT_AGENT",
    "agent_timeout_ms": "INPUT_AGENT_TIMEOUT_MS",
    "custom_prompt": "INPUT_CUSTOM_PROMPT",
    "language": "INPUT_LANGUAGE",
}


def load_config(config_path: str = ".spec-gardener.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .spec-gardener.yml in the current directory
      3. GitHub Action inputs (INPUT_* environment variables)
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    for key, env_name in _ACTION_INPUTS.items():
        value = os.environ.get(env_name, "")
        if value.strip():
            config[key] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials and workflow context from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")
    config["repository"] = os.environ.get("GITHUB_REPOSITORY")
    config["server_url"] = os.environ.get("GITHUB_SERVER_URL", "https://github.com")
    config["run_id"] = os.environ.get("GITHUB_RUN_ID")
    config["workspace"] = os.environ.get("GITHUB_WORKSPACE")

    return config


def get_timeout_seconds(config: dict) -> float:
    """Return the agent timeout in seconds, falling back to the default on bad input."""
    default_ms = DEFAULT_AGENT_TIMEOUT_MS
    raw = config.get("agent_timeout_ms")
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default_ms / 1000

    try:
        parsed = int(str(raw).strip())
    except ValueError:
        parsed = 0
    if parsed <= 0:
        logger.warning('Invalid agent_timeout_ms value "%s", falling back to %dms.', raw, default_ms)
        return default_ms / 1000
    return parsed / 1000
