from app.infra.llm.base import BaseLLMClient, chunk_text
from app.infra.llm.client import ReleaseNotesStreamer, get_notes_streamer
from app.infra.llm.factory import get_llm_client, reset_clients

__all__ = [
    "BaseLLMClient",
    "ReleaseNotesStreamer",
    "chunk_text",
    "get_llm_client",
    "get_notes_streamer",
    "reset_clients",
]
