"""SSE로 전달되는 스트림 이벤트 스키마

type 필드를 판별자로 사용하는 tagged union
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from app.domain.release_notes.schemas.base import ReleaseNotes


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class StartEvent(_Event):
    """세션 시작 - 다른 모든 이벤트보다 먼저 전송"""

    type: Literal["start"] = "start"
    diff_id: str = Field(alias="diffId")


class ProgressEvent(_Event):
    """배치 단위로 묶인 LLM 출력 텍스트"""

    type: Literal["progress"] = "progress"
    data: str


class NotesEvent(_Event):
    """추출된 릴리스 노트"""

    type: Literal["notes"] = "notes"
    data: ReleaseNotes


class MessageEvent(_Event):
    """관련성 필터에서 제외된 경우의 안내"""

    type: Literal["message"] = "message"
    data: str


class ErrorEvent(_Event):
    type: Literal["error"] = "error"
    error: str


class CompleteEvent(_Event):
    type: Literal["complete"] = "complete"
    diff_id: str | None = Field(default=None, alias="diffId")


StreamEvent = Annotated[
    Union[StartEvent, ProgressEvent, NotesEvent, MessageEvent, ErrorEvent, CompleteEvent],
    Field(discriminator="type"),
]

TERMINAL_EVENT_TYPES = frozenset({"complete", "error"})

_stream_event_adapter: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)


def encode_event(event: StreamEvent) -> str:
    """이벤트를 JSON 문자열로 직렬화 - 직렬화 전 union 스키마로 재검증"""
    validated = _stream_event_adapter.validate_python(event)
    return validated.model_dump_json(by_alias=True)


def decode_event(raw: str | bytes) -> StreamEvent:
    """JSON 문자열을 이벤트로 역직렬화

    Raises:
        pydantic.ValidationError: 알 수 없는 type이거나 필드가 맞지 않는 경우
    """
    return _stream_event_adapter.validate_json(raw)
