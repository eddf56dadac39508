"""
Turn raw generator text into a JSON value, or say why it cannot be done.

Steps run in order: strip formatting noise, cut out the first balanced
object/array (closing anything left open), strict parse, lenient parse.
Nothing here does I/O.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

import json_repair

logger = logging.getLogger(__name__)

# Template text that small models echo back instead of answering
PLACEHOLDER_PHRASES = (
    "your detailed helpful response here",
    "write your actual helpful answer here",
    "related question 1",
    "related question 2",
    "alternative activity name",
    "<activity name>",
    "<short factual description>",
    "<place or area>",
    "<one practical tip>",
    "<your answer>",
    "<distance, travel time and transport options>",
)

_FENCE = re.compile(r"```(?:json|JSON)?")
_LEADING_LABELS = (
    re.compile(r"^\s*(?:response|answer|output|json)\s*:\s*", re.IGNORECASE),
    re.compile(r"^\s*here(?:'s| is| are)\b[^\n{\[]*?:\s*", re.IGNORECASE),
    re.compile(r"^\s*\d+[.)]\s+"),
)

_CLOSERS = {"{": "}", "[": "]"}


@dataclass(frozen=True)
class RepairFailure:
    reason: str


def strip_noise(text: str) -> str:
    """Remove code fences and leading labels such as 'Response:' or '1.'."""
    text = _FENCE.sub("", text).strip()
    changed = True
    while changed:
        changed = False
        for pattern in _LEADING_LABELS:
            stripped = pattern.sub("", text, count=1)
            if stripped != text:
                text = stripped.strip()
                changed = True
    return text


def contains_placeholder(text: str) -> bool:
    lowered = text.lower()
    return any(phrase in lowered for phrase in PLACEHOLDER_PHRASES)


def extract_balanced(text: str) -> str | None:
    """
    Return the first balanced {...} or [...] span.

    When the text ends before the span closes, the missing closers are
    appended in nesting order (an unterminated string is closed first).
    Returns None when there is no opening bracket at all.
    """
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return None
    return _balanced_from(text, min(starts))


def _balanced_from(text: str, start: int) -> str:
    stack: list[str] = []
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(_CLOSERS[char])
        elif char in ("}", "]"):
            if stack and stack[-1] == char:
                stack.pop()
            if not stack:
                return text[start : index + 1]

    fragment = text[start:].rstrip()
    if in_string:
        fragment += '"'
    missing = "".join(reversed(stack))
    if missing:
        logger.debug(f"[Repair] Appending missing closers {missing!r}")
    return fragment + missing


def parse_lenient(candidate: str) -> Any:
    """Strict json.loads first, then json_repair for common model mistakes."""
    try:
        return json.loads(candidate)
    except ValueError:
        pass

    logger.debug("[Repair] Strict parse failed, attempting repair")
    try:
        repaired = json_repair.loads(candidate)
    except Exception as e:
        return RepairFailure(f"repair parse failed: {e}")

    if repaired in ("", None):
        return RepairFailure("repair parse produced nothing")
    return repaired


def repair_json_text(raw_text: str) -> Any:
    """
    Run the whole repair pipeline over raw generator output.

    Returns:
        The parsed JSON value, or a RepairFailure
    """
    if not raw_text or not raw_text.strip():
        return RepairFailure("empty text")

    if contains_placeholder(raw_text):
        return RepairFailure("response contains template placeholder text")

    cleaned = strip_noise(raw_text)
    candidate = extract_balanced(cleaned)
    if candidate is None:
        return RepairFailure("no JSON object or array found")

    parsed = parse_lenient(candidate)
    if candidate.startswith("[") and not _holds_objects(parsed):
        # A bracket in leading prose, e.g. "plan for [3] days:", is not the payload
        brace = cleaned.find("{")
        if brace != -1:
            logger.debug("[Repair] Leading array holds no objects, retrying from first '{'")
            return parse_lenient(_balanced_from(cleaned, brace))
    return parsed


def _holds_objects(value: Any) -> bool:
    if isinstance(value, dict):
        return True
    return isinstance(value, list) and bool(value) and all(isinstance(v, dict) for v in value)
