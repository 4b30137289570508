from __future__ import annotations
import json
import re

from llm.prompts import NOTES_FENCE
from llm.providers.base import LLMProvider

_SPLIT_RE = re.compile(r"[.;!\n]+|,\s+(?:and\s+)?|\s+and\s+then\s+")

# (keywords, category) checked in order; first hit wins
_CATEGORY_KEYWORDS = [
    (("meeting", "call", "standup", "sync", "1-on-1", "retro"), "Meetings"),
    (("invoice", "expense", "form", "tax", "paperwork", "documentation", "renew"), "Admin"),
    (("report", "review", "deploy", "code", "client", "presentation", "bug", "logs"), "Work"),
    (("dentist", "doctor", "grocer", "mom", "dad", "gym", "run", "birthday"), "Personal"),
]
_HIGH_KEYWORDS = ("urgent", "asap", "today", "critical", "by friday", "eod", "deadline")
_LOW_KEYWORDS = ("someday", "later", "maybe", "eventually", "when possible")


class MockProvider(LLMProvider):
    """
    Offline provider for local development and demos.

    Splits the fenced notes of the extraction prompt into clauses and returns
    them as a JSON task array, guessing priority/category from keywords.
    """

    name = "mock"

    def generate(
        self,
        *,
        system: str,
        user: str,
        model: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        notes = _fenced_notes(user)
        tasks = []
        for clause in _SPLIT_RE.split(notes):
            clause = clause.strip(" -*\t")
            if len(clause) < 3:
                continue
            lower = clause.lower()
            tasks.append({
                "title": clause[0].upper() + clause[1:],
                "priority": _priority(lower),
                "category": _category(lower),
            })
        return json.dumps(tasks)


def _fenced_notes(prompt: str) -> str:
    start = prompt.find(NOTES_FENCE)
    end = prompt.rfind(NOTES_FENCE)
    if start == -1 or end <= start:
        return ""
    return prompt[start + len(NOTES_FENCE):end]


def _priority(lower: str) -> str:
    if any(k in lower for k in _HIGH_KEYWORDS):
        return "High"
    if any(k in lower for k in _LOW_KEYWORDS):
        return "Low"
    return "Medium"


def _category(lower: str) -> str:
    for keywords, category in _CATEGORY_KEYWORDS:
        if any(k in lower for k in keywords):
            return category
    return "Other"
