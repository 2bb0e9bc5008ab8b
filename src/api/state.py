from typing import Optional

from llm.llm_client import LLMClient
from storage.preferences_store import PreferencesStore
from storage.record_store import RecordStore

# Global instances initialized at startup (or lazily on first request)
record_store: Optional[RecordStore] = None
preferences_store: Optional[PreferencesStore] = None
llm_client: Optional[LLMClient] = None
