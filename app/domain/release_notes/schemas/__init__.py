from app.domain.release_notes.schemas.base import (
    ChangeRecord,
    ReleaseNotes,
    RelevanceDecision,
)
from app.domain.release_notes.schemas.events import (
    TERMINAL_EVENT_TYPES,
    CompleteEvent,
    ErrorEvent,
    MessageEvent,
    NotesEvent,
    ProgressEvent,
    StartEvent,
    StreamEvent,
    decode_event,
    encode_event,
)
from app.domain.release_notes.schemas.github import PRInfo

__all__ = [
    "ChangeRecord",
    "ReleaseNotes",
    "RelevanceDecision",
    "PRInfo",
    "StreamEvent",
    "StartEvent",
    "ProgressEvent",
    "NotesEvent",
    "MessageEvent",
    "ErrorEvent",
    "CompleteEvent",
    "TERMINAL_EVENT_TYPES",
    "encode_event",
    "decode_event",
]
