"""SSE 프레임 인코딩/디코딩

프레임 형식: "data: <JSON>\n\n"
"""

import pydantic

from app.core.logging import get_logger
from app.domain.release_notes.schemas import StreamEvent, decode_event, encode_event

logger = get_logger(__name__)

FRAME_DELIMITER = "\n\n"
DATA_PREFIX = "data:"


def encode_frame(event: StreamEvent) -> str:
    """이벤트를 SSE 프레임 문자열로 변환"""
    return f"{DATA_PREFIX} {encode_event(event)}{FRAME_DELIMITER}"


def parse_frame(frame: str) -> StreamEvent | None:
    """SSE 프레임 하나를 이벤트로 변환

    여러 data 라인은 줄바꿈으로 이어 붙이고, event/id 등 다른 필드는 무시한다.

    Returns:
        data 라인이 없거나 JSON/스키마가 맞지 않으면 None
    """
    data_lines = []
    for line in frame.split("\n"):
        if line.startswith(DATA_PREFIX):
            data_lines.append(line[len(DATA_PREFIX) :].removeprefix(" "))
    if not data_lines:
        return None

    try:
        return decode_event("\n".join(data_lines))
    except pydantic.ValidationError as e:
        logger.warning("SSE 프레임 파싱 실패", error_count=e.error_count())
        return None


class SSEDecoder:
    """네트워크 읽기 단위로 나뉘어 도착하는 SSE 스트림을 이벤트로 재조립"""

    def __init__(self):
        self._buffer = ""

    def feed(self, chunk: str | bytes) -> list[StreamEvent]:
        """청크를 버퍼에 추가하고 완성된 프레임의 이벤트 반환"""
        if isinstance(chunk, bytes):
            chunk = chunk.decode("utf-8")
        self._buffer += chunk.replace("\r\n", "\n")

        *frames, self._buffer = self._buffer.split(FRAME_DELIMITER)
        return [event for event in map(self._parse, frames) if event is not None]

    def flush(self) -> list[StreamEvent]:
        """입력 종료 시 남은 버퍼 처리"""
        remaining, self._buffer = self._buffer, ""
        event = self._parse(remaining)
        return [event] if event is not None else []

    @staticmethod
    def _parse(frame: str) -> StreamEvent | None:
        if not frame.strip():
            return None
        return parse_frame(frame)
