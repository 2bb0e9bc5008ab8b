from __future__ import annotations
import os
from typing import Optional
import httpx
from taskboard.errors import UpstreamError
from .base import LLMProvider

ANTHROPIC_VERSION = "2023-06-01"

class AnthropicProvider(LLMProvider):
    def __init__(
        self,
        api_key: Optional[str] = None,
        max_tokens: int = 1024,
        timeout_s: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = (api_key if api_key is not None else os.getenv("ANTHROPIC_API_KEY", "")).strip()
        self.model = os.getenv("ANTHROPIC_MODEL", "claude-3-opus-20240229").strip()
        self.base_url = os.getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com").strip()
        self.max_tokens = max_tokens
        self.timeout_s = timeout_s
        self._transport = transport

        if not self.api_key:
            raise RuntimeError("ANTHROPIC_API_KEY is missing")

    def generate(self, *, system: str, user: str) -> str:
        url = f"{self.base_url}/v1/messages"
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": 0,
            "system": system,
            "messages": [{"role": "user", "content": user}],
        }

        try:
            with httpx.Client(timeout=self.timeout_s, transport=self._transport) as client:
                r = client.post(url, headers=headers, json=payload)
                r.raise_for_status()
                data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError(f"Anthropic request failed: {e}") from e

        # keep only text blocks, tool_use and friends are ignored
        blocks = data.get("content") or []
        text = "".join(
            b.get("text", "") for b in blocks
            if isinstance(b, dict) and b.get("type") == "text"
        )
        if not text.strip():
            raise UpstreamError("Anthropic response contained no text block")
        return text
