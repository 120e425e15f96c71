"""세션 -> 클라이언트 단방향 이벤트 채널

- send: close 이후에는 아무 동작도 하지 않음
- close: 여러 번 호출해도 한 번만 적용
- cancel: 원격 연결 종료 알림, 등록된 콜백을 정확히 한 번 실행
- frames: HTTP 응답 본문용 async iterator, close 전에 소비자가 사라지면 cancel
"""

import asyncio
from collections.abc import AsyncIterator, Callable

from app.core.logging import get_logger
from app.domain.release_notes.schemas import StreamEvent
from app.infra.sse.codec import encode_frame

logger = get_logger(__name__)

_CLOSE = object()


class EventChannel:
    """FIFO 순서를 보장하는 세션 단위 이벤트 채널"""

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._cancelled = False
        self._cancel_callbacks: list[Callable[[], None]] = []
        self.sent_count = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def send(self, event: StreamEvent) -> bool:
        """이벤트 전송

        Returns:
            실제로 큐에 들어갔으면 True, 닫힌 채널이면 False
        """
        if self._closed:
            return False
        self._queue.put_nowait(event)
        self.sent_count += 1
        return True

    def close(self) -> bool:
        """채널 종료 - 이미 보낸 이벤트는 순서대로 전달된 뒤 스트림이 끝난다

        Returns:
            이번 호출로 닫혔으면 True
        """
        if self._closed:
            return False
        self._closed = True
        self._queue.put_nowait(_CLOSE)
        return True

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """원격 연결 종료 시 호출할 콜백 등록"""
        if self._cancelled:
            callback()
            return
        self._cancel_callbacks.append(callback)

    def cancel(self) -> bool:
        """원격 연결 종료 처리 - 이후 전송은 모두 무시

        Returns:
            이번 호출로 취소되었으면 True
        """
        if self._cancelled:
            return False
        self._cancelled = True
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSE)
        callbacks, self._cancel_callbacks = self._cancel_callbacks, []
        for callback in callbacks:
            callback()
        return True

    async def events(self) -> AsyncIterator[StreamEvent]:
        """close될 때까지 이벤트를 순서대로 반환"""
        while True:
            item = await self._queue.get()
            if item is _CLOSE:
                return
            yield item

    async def frames(self) -> AsyncIterator[str]:
        """SSE 프레임 스트림 - StreamingResponse 본문으로 사용"""
        drained = False
        try:
            async for event in self.events():
                if self._cancelled:
                    break
                yield encode_frame(event)
            drained = True
        finally:
            if not drained and self.cancel():
                logger.info("클라이언트 연결 종료로 스트림 취소")
