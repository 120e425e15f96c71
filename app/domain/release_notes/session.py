"""릴리스 노트 스트리밍 세션

요청 하나를 처음부터 끝까지 처리한다.

    IDLE -> STARTED -> STREAMING -> FINALIZING -> CLOSED(success)
    STARTED -> CLOSED(rejected)       관련성 필터 제외, LLM 호출 없음
    any -> CLOSED(error)              LLM/내부 오류, error 이벤트 한 번
                                      (notes 전송 후 오류는 complete로 종료)
    any -> CLOSED(cancelled)          클라이언트 연결 종료, 이후 이벤트 없음

버퍼와 진행 상태는 세션 객체가 소유하며, feed/finalize는
이벤트 루프 없이도 상태 전이를 검증할 수 있도록 동기 메서드로 둔다.
"""

import asyncio
from collections.abc import Callable
from enum import Enum

from app.core.config import settings
from app.core.context import bind_diff_id
from app.core.exceptions import CustomException, StreamTimeoutError, is_abort_error
from app.core.logging import get_logger
from app.domain.release_notes.extractor import finalize_notes, try_extract
from app.domain.release_notes.prompts import build_prompt
from app.domain.release_notes.relevance import should_include_pr
from app.domain.release_notes.schemas import (
    ChangeRecord,
    CompleteEvent,
    ErrorEvent,
    MessageEvent,
    NotesEvent,
    ProgressEvent,
    StartEvent,
    StreamEvent,
)
from app.infra.llm.client import ReleaseNotesStreamer
from app.infra.sse.channel import EventChannel

logger = get_logger(__name__)

REJECTION_MESSAGE = (
    "This PR was skipped because it does not look relevant for release notes "
    "(documentation, CI, tests or dependency updates)."
)
UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"


class SessionState(str, Enum):
    IDLE = "idle"
    STARTED = "started"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    CLOSED = "closed"


class CloseReason(str, Enum):
    SUCCESS = "success"
    REJECTED = "rejected"
    ERROR = "error"
    CANCELLED = "cancelled"


class ReleaseNotesSession:
    """PR 하나에 대한 스트리밍 분석 세션"""

    def __init__(
        self,
        record: ChangeRecord,
        channel: EventChannel,
        streamer: ReleaseNotesStreamer,
        relevance_check: Callable[[ChangeRecord], bool] = should_include_pr,
        progress_batch_size: int | None = None,
        idle_timeout: float | None = None,
        total_timeout: float | None = None,
        max_diff_length: int | None = None,
    ):
        self.record = record
        self.channel = channel
        self._streamer = streamer
        self._relevance_check = relevance_check
        self._batch_size = progress_batch_size or settings.progress_batch_size
        self._idle_timeout = idle_timeout or settings.stream_idle_timeout
        self._total_timeout = total_timeout or settings.stream_total_timeout
        self._max_diff_length = max_diff_length or settings.diff_max_length

        self.state = SessionState.IDLE
        self.close_reason: CloseReason | None = None
        self.buffer = ""
        self.chunk_count = 0
        self.notes_found = False
        self._pending: list[str] = []
        self._task: asyncio.Task | None = None

        channel.on_cancel(self.cancel)

    @property
    def closed(self) -> bool:
        return self.state is SessionState.CLOSED

    def start(self) -> asyncio.Task:
        """세션을 백그라운드 태스크로 실행"""
        if self._task is None:
            self._task = asyncio.create_task(self.run(), name=f"release-notes-{self.record.id}")
        return self._task

    def cancel(self) -> None:
        """클라이언트 연결 종료 처리 - 진행 중인 LLM 호출 중단"""
        if self.closed:
            return
        logger.info("세션 취소 state=%s chunks=%d", self.state.value, self.chunk_count)
        self._close(CloseReason.CANCELLED)
        task = self._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def run(self) -> None:
        """세션 실행 - 모든 종료 경로에서 채널을 닫는다"""
        if self.state is not SessionState.IDLE:
            return
        with bind_diff_id(self.record.id):
            await self._run()

    async def _run(self) -> None:
        self.state = SessionState.STARTED
        self._emit(StartEvent(diff_id=self.record.id))

        try:
            if not self._relevance_check(self.record):
                logger.info("관련성 필터 제외 title=%s", self.record.description)
                self._emit(MessageEvent(data=REJECTION_MESSAGE))
                self._close(CloseReason.REJECTED)
                return

            prompt = build_prompt(
                self.record.diff_text,
                self.record.description,
                max_length=self._max_diff_length,
            )
            self.state = SessionState.STREAMING
            await self._consume(prompt)
            if self.closed:
                return

            for event in self.finalize():
                self._emit(event)
            self._emit(CompleteEvent(diff_id=self.record.id))
            self._close(CloseReason.SUCCESS)

        except asyncio.CancelledError:
            self._close(CloseReason.CANCELLED)
            raise

        except Exception as e:
            if is_abort_error(e):
                logger.info("연결 중단으로 세션 종료 error=%s", type(e).__name__)
                self._close(CloseReason.CANCELLED)
                return

            if self.notes_found:
                # 결과는 이미 notes로 전달됨, error 대신 complete로 종료
                logger.warning("노트 전송 후 스트림 오류 error=%s", e, exc_info=True)
                if self._pending:
                    self._emit(self._flush_progress())
                self._emit(CompleteEvent(diff_id=self.record.id))
                self._close(CloseReason.SUCCESS)
                return

            logger.error("세션 처리 실패 error=%s", e, exc_info=True)
            self._emit(ErrorEvent(error=self._error_message(e)))
            self._close(CloseReason.ERROR)

    def feed(self, delta: str) -> list[StreamEvent]:
        """LLM delta 하나를 반영하고 전송할 이벤트 반환

        batch_size개 청크마다 progress 이벤트 하나로 묶고,
        노트를 아직 찾지 못했으면 누적 버퍼에서 추출을 시도한다.
        """
        if not delta or self.closed:
            return []

        self.buffer += delta
        self.chunk_count += 1
        self._pending.append(delta)

        events: list[StreamEvent] = []
        if len(self._pending) >= self._batch_size:
            events.append(self._flush_progress())

        if not self.notes_found:
            notes = try_extract(self.buffer)
            if notes:
                self.notes_found = True
                logger.info("스트리밍 중 노트 추출 성공 chunks=%d", self.chunk_count)
                events.append(NotesEvent(data=notes))

        return events

    def finalize(self) -> list[StreamEvent]:
        """스트림 종료 후 남은 progress와 최종 fallback 노트 반환"""
        self.state = SessionState.FINALIZING
        events: list[StreamEvent] = []

        if self._pending:
            events.append(self._flush_progress())

        if not self.notes_found:
            self.notes_found = True
            events.append(NotesEvent(data=finalize_notes(self.buffer)))

        logger.info(
            "스트림 종료 chunks=%d buffer_length=%d",
            self.chunk_count,
            len(self.buffer),
        )
        return events

    async def _consume(self, prompt: str) -> None:
        """LLM 스트림 소비 - idle/total 타임아웃 적용"""
        loop = asyncio.get_running_loop()
        started_at = loop.time()

        def deadline() -> float:
            return min(started_at + self._total_timeout, loop.time() + self._idle_timeout)

        stream = self._streamer.astream(prompt, session_id=self.record.id)
        try:
            async with asyncio.timeout_at(deadline()) as scope:
                async for delta in stream:
                    if self.closed:
                        break
                    for event in self.feed(delta):
                        self._emit(event)
                    scope.reschedule(deadline())
        except TimeoutError as e:
            raise StreamTimeoutError(
                detail=f"idle={self._idle_timeout}s total={self._total_timeout}s"
            ) from e
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

    def _flush_progress(self) -> ProgressEvent:
        text = "".join(self._pending)
        self._pending.clear()
        return ProgressEvent(data=text)

    def _emit(self, event: StreamEvent) -> bool:
        if self.closed:
            return False
        return self.channel.send(event)

    def _close(self, reason: CloseReason) -> None:
        if self.closed:
            return
        self.state = SessionState.CLOSED
        self.close_reason = reason
        self.channel.close()
        logger.info("세션 종료 reason=%s chunks=%d", reason.value, self.chunk_count)

    @staticmethod
    def _error_message(exc: Exception) -> str:
        if isinstance(exc, CustomException):
            return exc.message
        return str(exc) or UNKNOWN_ERROR_MESSAGE
