"""Prompt templates sent to the agent.

A template is a fixed intro, the output-format contract, and an ordered list
of sections rendered from the discussion context. Sections with an
``include_when`` predicate are left out entirely when it returns False.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from spec_gardener_core.models import DiscussionContext

SectionBuilder = Callable[[DiscussionContext, Optional[str]], str]
SectionPredicate = Callable[[DiscussionContext, Optional[str]], bool]


@dataclass(frozen=True)
class PromptSection:
    id: str
    title: str
    build_body: SectionBuilder
    include_when: Optional[SectionPredicate] = None


@dataclass(frozen=True)
class PromptTemplate:
    language: str
    intro: list[str]
    format: list[str]
    sections: list[PromptSection] = field(default_factory=list)


def _build_comments_section(context: DiscussionContext) -> str:
    if not context.comments:
        return "(no comments)"
    return "\n\n".join(
        f"# Comment {index}\nAuthor: {comment.author}\nCreated: {comment.created_at}\n{comment.body}"
        for index, comment in enumerate(context.comments, 1)
    )


def _build_changed_files_section(context: DiscussionContext) -> str:
    if not context.changed_files:
        return "(no files changed)"
    return "\n".join(
        f"{f.filename} ({f.status}; +{f.additions} -{f.deletions}; {f.changes} changes)" for f in context.changed_files
    )


_RESET_NOTE = (
    "The discussion was reset. The specification below is the last description written by a person, "
    "and only comments posted since the reset are included."
)

DEFAULT_PROMPT_TEMPLATE = PromptTemplate(
    language="en",
    intro=[
        "You are a requirements assistant that analyzes codebases to refine specifications.",
        "Read the codebase to understand the existing implementation.",
        "If the specification is insufficient, ask clarifying questions.",
        'If the specification is already clear and complete, return {"type":"no_change"}.',
        "Only return complete when you actually refine or improve the body.",
        "Do not rewrite the body with the same or similar content.",
        "If the specification is sufficient and needs updates, output the completed spec.",
        "When outputting a completed spec, you may include a refined title only if the current title needs "
        "improvement.",
        "Do not include code examples, snippets, pseudo-code, or code blocks.",
        "Focus on requirements, functional changes, and expected behavior, not implementation details.",
        "Use implementation-agnostic language that is clear and readable to any engineer.",
    ],
    format=[
        "Return JSON only.",
        "Format:",
        '{"type":"question","content":"..."}',
        "or",
        '{"type":"complete","body":"...","comment":"optional completion comment","title":"optional refined title"}',
        "or",
        '{"type":"no_change"}',
    ],
    sections=[
        PromptSection(
            id="custom",
            title="# Custom Instructions",
            build_body=lambda _context, custom_prompt: (custom_prompt or "").strip(),
            include_when=lambda _context, custom_prompt: bool((custom_prompt or "").strip()),
        ),
        PromptSection(
            id="reset",
            title="# Reset",
            build_body=lambda _context, _custom: _RESET_NOTE,
            include_when=lambda context, _custom: context.original_description is not None,
        ),
        PromptSection(
            id="issue-title",
            title="# Issue Title",
            build_body=lambda context, _custom: context.title,
        ),
        PromptSection(
            id="current-spec",
            title="# Current Specification",
            build_body=lambda context, _custom: context.body,
        ),
        PromptSection(
            id="comments",
            title="# Comments",
            build_body=lambda context, _custom: _build_comments_section(context),
        ),
        PromptSection(
            id="changed-files",
            title="# Changed Files",
            build_body=lambda context, _custom: _build_changed_files_section(context),
            include_when=lambda context, _custom: context.changed_files is not None,
        ),
    ],
)

PROMPT_TEMPLATES: dict[str, PromptTemplate] = {
    "en": DEFAULT_PROMPT_TEMPLATE,
}


def get_prompt_template(language: Optional[str] = None) -> PromptTemplate:
    if not language:
        return DEFAULT_PROMPT_TEMPLATE
    return PROMPT_TEMPLATES.get(language, DEFAULT_PROMPT_TEMPLATE)


def build_prompt(context: DiscussionContext, custom_prompt: Optional[str] = None, language: Optional[str] = None) -> str:
    template = get_prompt_template(language)
    parts = [*template.intro, "", *template.format]

    for section in template.sections:
        if section.include_when is not None and not section.include_when(context, custom_prompt):
            continue
        parts.extend(["", section.title, section.build_body(context, custom_prompt) or "(empty)"])

    return "\n".join(parts)
