from typing import List, Optional

from extraction.parser import parse_candidates
from llm.llm_client import LLMClient
from taskboard.models import TaskCandidate


class TaskExtractor:

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self.llm_client = llm_client or LLMClient()

    def extract(self, text: str, folder_id: Optional[str] = None) -> List[TaskCandidate]:
        completion = self.llm_client.complete(text)
        return parse_candidates(completion, source_text=text, folder_id=folder_id)
