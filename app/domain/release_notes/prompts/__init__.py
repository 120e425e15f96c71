from app.domain.release_notes.prompts.builder import (
    TRUNCATION_MARKER,
    build_prompt,
    truncate_diff,
)
from app.domain.release_notes.prompts.generation import (
    RELEASE_NOTES_HUMAN,
    RELEASE_NOTES_SYSTEM,
)

__all__ = [
    "RELEASE_NOTES_SYSTEM",
    "RELEASE_NOTES_HUMAN",
    "TRUNCATION_MARKER",
    "build_prompt",
    "truncate_diff",
]
