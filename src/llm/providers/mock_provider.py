from __future__ import annotations
import json
import re
from .base import LLMProvider

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?;\n])\s+")
_TEXT_MARKER = "Text to analyze:"

class MockProvider(LLMProvider):
    """Offline provider for local development: one task per sentence."""

    def generate(self, *, system: str, user: str) -> str:
        text = user.split(_TEXT_MARKER, 1)[-1].strip()
        tasks = []
        for sentence in _SENTENCE_SPLIT.split(text):
            sentence = sentence.strip(" .;\n")
            if not sentence:
                continue
            tasks.append({
                "text": sentence,
                "priority": self._priority(sentence.lower()),
                "category": self._category(sentence.lower()),
                "dueDate": None,
            })

        if not tasks:
            return "There are no actionable tasks in this text: []"
        return "Here are the extracted tasks:\n" + json.dumps(tasks, indent=2)

    @staticmethod
    def _priority(lower: str) -> int:
        if "high priority" in lower or "urgent" in lower or "asap" in lower:
            return 1
        if "low priority" in lower or "someday" in lower:
            return 3
        return 2

    @staticmethod
    def _category(lower: str) -> str:
        if "meeting" in lower or "call" in lower or "sync" in lower:
            return "meeting"
        if "deadline" in lower or "due" in lower or "by friday" in lower:
            return "deadline"
        if "project" in lower:
            return "project"
        return "general"
