from __future__ import annotations
import os
from typing import Optional
import httpx
from taskboard.errors import UpstreamError
from .base import LLMProvider

class OllamaProvider(LLMProvider):
    def __init__(
        self,
        max_tokens: int = 1024,
        timeout_s: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.model = os.getenv("OLLAMA_MODEL", "llama3.1").strip()
        self.base_url = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").strip()
        self.max_tokens = max_tokens
        self.timeout_s = timeout_s
        self._transport = transport

    def generate(self, *, system: str, user: str) -> str:
        url = f"{self.base_url}/api/chat"
        payload = {
            "model": self.model,
            "stream": False,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "options": {"temperature": 0, "num_predict": self.max_tokens},
        }

        try:
            with httpx.Client(timeout=self.timeout_s, transport=self._transport) as client:
                r = client.post(url, json=payload)
                r.raise_for_status()
                data = r.json()
            content = data["message"]["content"]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            raise UpstreamError(f"Ollama request failed: {e}") from e

        if not content or not content.strip():
            raise UpstreamError("Ollama response contained no text")
        return content
