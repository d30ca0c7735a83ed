"""Fixed strings shared by the classifier, the formatter and the dispatcher."""

from __future__ import annotations

COMMAND_TOKEN = "/spec-gardener"

# Presence of this marker in a body or comment means Spec Gardener wrote it.
# It is the only state carried between runs.
FOOTER_MARKER = "<!-- spec-gardener -->"
FOOTER = f"{FOOTER_MARKER}\n<sub>Maintained by Spec Gardener</sub>"

COMMANDS_HINT = (
    f"<sub>Commands: `{COMMAND_TOKEN}` to refine again, "
    f"`{COMMAND_TOKEN} reset` to start over from the original description, "
    f"`{COMMAND_TOKEN} help` for details.</sub>"
)

# Commands only appear after a list bullet or inside backticks, never at the
# start of a line, so posting this text cannot trigger a run.
COMMANDS_LIST = f"""\
### Spec Gardener commands

- `{COMMAND_TOKEN}`: refine the specification using the current description and all comments.
- `{COMMAND_TOKEN} reset`: start over from the last human-written description, \
considering only comments posted from the reset onwards.
- `{COMMAND_TOKEN} help`: show this message."""

DEFAULT_COMPLETION_COMMENT = "Spec updated by Spec Gardener."
NO_OUTPUT_MESSAGE = "No output received from agent."

THUMBS_UP_REACTION = "+1"

DEFAULT_AGENT_TIMEOUT_MS = 600_000
