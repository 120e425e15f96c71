from app.api.v1.schemas.release_notes import (
    AnalyzeRequest,
    SampleDiff,
    SampleDiffsResponse,
)

__all__ = [
    "AnalyzeRequest",
    "SampleDiff",
    "SampleDiffsResponse",
]
