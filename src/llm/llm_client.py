import logging
import os
from typing import Optional

from llm.providers.base import LLMProvider
from taskboard.errors import TaskBoardError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

LLM_PROVIDER = os.getenv("LLM_PROVIDER", "anthropic").strip().lower()
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "1024"))
LLM_TIMEOUT_S = float(os.getenv("LLM_TIMEOUT_S", "30"))

SYSTEM_PROMPT = "You extract actionable tasks from free-form text and answer with JSON only."

EXTRACTION_TEMPLATE = """Extract actionable tasks from this text. Format each task as a JSON object with:
- text: The clear, actionable task description
- priority: 1 (high), 2 (medium), or 3 (low) based on urgency/importance
- category: "project", "meeting", "deadline", or "general"
- dueDate: ISO date string if mentioned, null if not

Return as a JSON array. Only include clear, actionable items.

Text to analyze: {text}"""


def build_provider(name: str = LLM_PROVIDER) -> LLMProvider:
    """Instantiate the provider named by LLM_PROVIDER."""
    if name == "anthropic":
        from llm.providers.anthropic_provider import AnthropicProvider
        return AnthropicProvider(max_tokens=LLM_MAX_TOKENS, timeout_s=LLM_TIMEOUT_S)
    if name == "openai":
        from llm.providers.openai_provider import OpenAIProvider
        return OpenAIProvider(max_tokens=LLM_MAX_TOKENS, timeout_s=LLM_TIMEOUT_S)
    if name == "ollama":
        from llm.providers.ollama_provider import OllamaProvider
        return OllamaProvider(max_tokens=LLM_MAX_TOKENS, timeout_s=LLM_TIMEOUT_S)
    if name == "mock":
        from llm.providers.mock_provider import MockProvider
        return MockProvider()
    raise ValueError(f"Unknown LLM_PROVIDER: {name}")


class LLMClient:
    """Single-shot completion client for task extraction.

    One request per call, no streaming and no conversation state. The
    provider is resolved lazily so the app can start without credentials.
    """

    def __init__(self, provider: Optional[LLMProvider] = None):
        self._provider = provider

    @property
    def provider(self) -> LLMProvider:
        if self._provider is None:
            try:
                self._provider = build_provider()
            except (RuntimeError, ValueError) as e:
                raise UpstreamError(f"LLM provider unavailable: {e}") from e
        return self._provider

    def build_prompt(self, text: str) -> str:
        return EXTRACTION_TEMPLATE.format(text=text)

    def complete(self, text: str) -> str:
        """Return the raw completion for `text`, or raise UpstreamError."""
        if not text or not text.strip():
            raise ValidationError("No text provided")

        prompt = self.build_prompt(text)
        try:
            out = self.provider.generate(system=SYSTEM_PROMPT, user=prompt)
        except TaskBoardError:
            raise
        except Exception as e:
            logger.error(f"LLM provider call failed: {e}")
            raise UpstreamError(f"LLM provider call failed: {e}") from e

        if not isinstance(out, str) or not out.strip():
            raise UpstreamError("LLM returned no text")

        logger.info(f"LLM completion received ({len(out)} chars)")
        return out
