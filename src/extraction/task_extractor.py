from typing import List

from extraction.response_parser import parse_task_candidates
from llm.llm_client import LLMClient
from llm.prompts import build_extraction_prompt
from task_organizer.models import ParsedTaskCandidate


class TaskExtractor:

    def __init__(self, llm_client: LLMClient, strict: bool = False):
        self.llm = llm_client
        self.strict = strict

    @property
    def is_configured(self) -> bool:
        return self.llm.is_configured

    def extract(self, text: str) -> List[ParsedTaskCandidate]:
        prompt = build_extraction_prompt(text)
        raw = self.llm.complete(prompt)
        return parse_task_candidates(raw, strict=self.strict)
