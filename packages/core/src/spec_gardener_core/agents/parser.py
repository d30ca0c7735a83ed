"""Turn raw agent text into a typed result.

Agents are asked to reply with a single JSON object but routinely wrap it in
prose or a fenced code block, leave trailing commas, or use single quotes.
``parse_cli_output`` tries progressively looser readings of the text:

    direct decode → first-"{"-to-last-"}" candidate → repaired candidate

and falls back to treating the whole reply as a question for the author.
It never raises.

The repair helpers are pure text transforms that leave double-quoted string
content untouched, so repairing JSON that is already valid is a no-op.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from spec_gardener_core.constants import DEFAULT_COMPLETION_COMMENT, NO_OUTPUT_MESSAGE
from spec_gardener_core.models import CliResult, Complete, NoChange, ParseResult, Question

logger = logging.getLogger(__name__)


def parse_cli_output(output: str) -> ParseResult:
    trimmed = (output or "").strip()
    if not trimmed:
        return ParseResult(result=Question(content=NO_OUTPUT_MESSAGE), parse_failed=True)

    result = _decode(trimmed)
    if result is None:
        candidate = extract_json_candidate(trimmed)
        if candidate is not None:
            result = _decode(candidate)
            if result is None:
                repaired = repair_json(candidate)
                if repaired != candidate:
                    result = _decode(repaired)

    if result is None:
        logger.debug("No recognised result shape in agent output; falling back to question.")
        return ParseResult(result=Question(content=trimmed), parse_failed=True)
    return ParseResult(result=result, parse_failed=False)


def result_from_dict(data: object) -> Optional[CliResult]:
    """Build a CliResult from decoded JSON, or None when the shape is not recognised.

    ``type`` is the discriminant; ``status`` is accepted as a legacy alias and
    only consulted when ``type`` is absent.
    """
    if not isinstance(data, dict):
        return None
    kind = data.get("type")
    if kind is None:
        kind = data.get("status")

    if kind == "question":
        content = data.get("content")
        if _non_empty(content):
            return Question(content=content)
        return None

    if kind == "complete":
        body = data.get("body")
        if not _non_empty(body):
            return None
        comment = data.get("comment")
        title = data.get("title")
        return Complete(
            body=body,
            comment=comment if _non_empty(comment) else DEFAULT_COMPLETION_COMMENT,
            title=title if _non_empty(title) else None,
        )

    if kind == "no_change":
        return NoChange()

    return None


def extract_json_candidate(text: str) -> Optional[str]:
    """Return the substring from the first "{" to the last "}" inclusive, if any."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def repair_json(candidate: str) -> str:
    # Quotes first: comma removal only recognises double-quoted strings.
    return strip_trailing_commas(normalize_quotes(candidate))


def normalize_quotes(text: str) -> str:
    """Rewrite single-quoted strings and keys to double-quoted ones.

    Double-quoted strings are copied through verbatim, including any
    apostrophes they contain. Inside a converted string, embedded double
    quotes are escaped and ``\\'`` becomes a bare apostrophe.
    """
    if "'" not in text:
        return text

    out: list[str] = []
    quote: Optional[str] = None
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if quote is None:
            if ch == '"':
                quote = '"'
                out.append(ch)
            elif ch == "'":
                quote = "'"
                out.append('"')
            else:
                out.append(ch)
        elif quote == '"':
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 1
            elif ch == '"':
                quote = None
        else:
            if ch == "\\" and i + 1 < n:
                nxt = text[i + 1]
                out.append("'" if nxt == "'" else ch + nxt)
                i += 1
            elif ch == "'":
                quote = None
                out.append('"')
            elif ch == '"':
                out.append('\\"')
            else:
                out.append(ch)
        i += 1
    return "".join(out)


def strip_trailing_commas(text: str) -> str:
    """Drop commas that directly precede a closing "}" or "]" outside strings."""
    if "," not in text:
        return text

    out: list[str] = []
    in_string = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 1
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
            out.append(ch)
        elif ch == ",":
            j = i + 1
            while j < n and text[j].isspace():
                j += 1
            if j >= n or text[j] not in "}]":
                out.append(ch)
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def _decode(candidate: str) -> Optional[CliResult]:
    try:
        # strict=False tolerates raw newlines inside strings, which agents emit
        # for multi-line spec bodies.
        data = json.loads(candidate, strict=False)
    except (ValueError, RecursionError):
        return None
    return result_from_dict(data)


def _non_empty(value: object) -> bool:
    return isinstance(value, str) and value != ""
