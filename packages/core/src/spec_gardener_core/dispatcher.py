"""Map an agent result to exactly one action on the issue or pull request.

Planning is pure (``plan_effect``) and applying is a thin PyGithub call
(``apply_effect``), so the decision can be tested without a GitHub client.
The dispatcher never looks at ``ParseResult.parse_failed``: a fallback
question is posted exactly like a real one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from spec_gardener_core.constants import THUMBS_UP_REACTION
from spec_gardener_core.format import build_comment, build_spec_body, normalize_title
from spec_gardener_core.models import CliResult, Complete, DiscussionContext, NoChange, Question

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddReaction:
    content: str = THUMBS_UP_REACTION


@dataclass(frozen=True)
class PostComment:
    body: str


@dataclass(frozen=True)
class UpdateSpec:
    body: str
    comment: str
    title: Optional[str] = None  # None means the title is left untouched


Effect = Union[AddReaction, PostComment, UpdateSpec]


def plan_effect(result: CliResult, context: DiscussionContext, mention_author: bool = True) -> Effect:
    if isinstance(result, NoChange):
        return AddReaction()

    if isinstance(result, Question):
        return PostComment(body=build_comment(result.content, context.author, mention_author))

    if isinstance(result, Complete):
        title = None
        if result.title:
            new_title = normalize_title(result.title)
            if new_title and new_title != normalize_title(context.title):
                title = new_title
        return UpdateSpec(
            body=build_spec_body(result.body),
            title=title,
            comment=build_comment(result.comment, context.author, mention_author),
        )

    raise TypeError(f"Unsupported result type: {type(result).__name__}")


def apply_effect(issue, effect: Effect) -> None:
    """Perform ``effect`` against a PyGithub Issue (pull requests included)."""
    if isinstance(effect, AddReaction):
        issue.create_reaction(effect.content)
        logger.info("Added %s reaction to #%s.", effect.content, issue.number)
        return

    if isinstance(effect, PostComment):
        issue.create_comment(effect.body)
        logger.info("Posted question comment on #%s.", issue.number)
        return

    if isinstance(effect, UpdateSpec):
        if effect.title is not None:
            issue.edit(body=effect.body, title=effect.title)
        else:
            issue.edit(body=effect.body)
        issue.create_comment(effect.comment)
        logger.info("Updated specification on #%s%s.", issue.number, " (title changed)" if effect.title else "")
        return

    raise TypeError(f"Unsupported effect type: {type(effect).__name__}")


def dispatch(result: CliResult, context: DiscussionContext, issue, mention_author: bool = True) -> Effect:
    effect = plan_effect(result, context, mention_author)
    apply_effect(issue, effect)
    return effect
