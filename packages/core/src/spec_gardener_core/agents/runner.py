"""Run a command-line agent as a subprocess with a bounded wall-clock time.

``Popen.communicate(timeout=...)`` races the process against the timer and
drains stdout and stderr together, so a chatty agent cannot block on a full
pipe. The agent starts in its own session; when the timer wins, the whole
process group is killed, so helper processes the agent spawned cannot keep
the pipes open. Whatever output remains is collected for a short grace
period before the timeout is reported.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from typing import Optional, Sequence

from spec_gardener_core.agents.base import AgentExitError, AgentTimeoutError

logger = logging.getLogger(__name__)

# Seconds to wait for remaining output after the agent was killed.
DRAIN_TIMEOUT = 5


def _kill_process_group(proc: subprocess.Popen) -> None:
    if hasattr(os, "killpg"):
        try:
            os.killpg(proc.pid, signal.SIGKILL)
            return
        except ProcessLookupError:
            return
        except PermissionError:
            pass
    proc.kill()


def run_agent_process(
    command: str,
    args: Sequence[str],
    prompt: str,
    timeout: Optional[float] = None,
    cwd: Optional[str] = None,
) -> str:
    """Run ``command *args prompt`` and return its stdout.

    Raises AgentTimeoutError when ``timeout`` seconds elapse, AgentExitError
    when the command is missing or exits non-zero.
    """
    argv = [command, *args, prompt]
    logger.info("Running: %s %s (cwd: %s)", command, " ".join(args), cwd or ".")

    try:
        proc = subprocess.Popen(
            argv,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            start_new_session=True,
        )
    except OSError as e:
        raise AgentExitError(None, f"could not start {command!r}: {e}") from e

    try:
        stdout, stderr = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        _kill_process_group(proc)
        try:
            _, stderr = proc.communicate(timeout=DRAIN_TIMEOUT)
        except subprocess.TimeoutExpired:
            # A descendant left the group and still holds the pipes.
            logger.warning("Agent output was not drained within %ds after kill.", DRAIN_TIMEOUT)
            stderr = ""
        raise AgentTimeoutError(timeout, stderr or "")

    if proc.returncode != 0:
        raise AgentExitError(proc.returncode, stderr or "")

    if stderr and stderr.strip():
        logger.info("Agent stderr: %s", stderr.strip())

    return stdout or ""
