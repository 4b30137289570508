"""
Turns raw model output into validated task candidates.

Models are asked for a bare JSON array but regularly wrap it in prose
("Sure! Here are your tasks: [...]"). The array is located by scanning
bracket depth from the first '[' (quotes and escapes inside JSON strings are
skipped), then decoded, then every element is clamped to the closed
priority/category enumerations.
"""

import json
import logging
from typing import Iterator, List, Optional, Tuple

from task_organizer.errors import ParseError
from task_organizer.models import ParsedTaskCandidate

logger = logging.getLogger(__name__)


def _matching_bracket(text: str, start: int) -> Optional[int]:
    """Index of the ']' closing the '[' at `start`, or None if unbalanced."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "[{":
            depth += 1
        elif ch in "]}":
            depth -= 1
            if depth == 0:
                return i if ch == "]" else None
            if depth < 0:
                return None
    return None


def iter_array_spans(text: str) -> Iterator[Tuple[int, int]]:
    """Yield (start, end) of balanced '[...]' spans, outermost first, left to right."""
    pos = text.find("[")
    while pos != -1:
        end = _matching_bracket(text, pos)
        if end is None:
            pos = text.find("[", pos + 1)
            continue
        yield pos, end + 1
        pos = text.find("[", end + 1)


def extract_json_array(text: str, strict: bool = False) -> list:
    """
    Return the first JSON array embedded in `text` that holds at least one object.

    Arrays without objects (citations like "[1]", empty lists) are skipped.
    No array at all -> []. Arrays found but none decodes -> ParseError when
    `strict`, otherwise [] with a warning.
    """
    if not text:
        return []

    spans = 0
    decoded = 0
    last_error: Optional[json.JSONDecodeError] = None
    for start, end in iter_array_spans(text):
        spans += 1
        try:
            value = json.loads(text[start:end])
        except json.JSONDecodeError as e:
            last_error = e
            continue
        if not isinstance(value, list):
            continue
        decoded += 1
        if any(isinstance(item, dict) for item in value):
            return value
        if value:
            logger.info(f"Skipping array without task objects at offset {start}: {text[start:end]:.40}")

    if decoded:
        logger.info("No JSON array with task objects found in AI response")
    elif spans and last_error is not None:
        if strict:
            raise ParseError(f"AI response is not valid JSON: {last_error}")
        logger.warning(f"Could not decode JSON array from AI response ({last_error}); treating as empty")
    else:
        logger.info("No JSON array found in AI response")
    return []


def parse_task_candidates(raw_text: str, strict: bool = False) -> List[ParsedTaskCandidate]:
    """Decode and normalize the model output, preserving order."""
    items = extract_json_array(raw_text, strict=strict)

    candidates: List[ParsedTaskCandidate] = []
    for idx, item in enumerate(items):
        candidate = ParsedTaskCandidate.from_raw(item)
        if candidate is None:
            logger.warning(f"Skipping AI task #{idx}: not an object with a title ({item!r:.80})")
            continue
        if isinstance(item, dict) and (
            item.get("priority") != candidate.priority.value
            or item.get("category") != candidate.category.value
        ):
            logger.warning(
                f"Coerced AI task #{idx}: priority={item.get('priority')!r}->{candidate.priority.value}, "
                f"category={item.get('category')!r}->{candidate.category.value}"
            )
        candidates.append(candidate)
    return candidates
