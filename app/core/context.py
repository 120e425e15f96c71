"""
로그 컨텍스트 관리 모듈

- request_id: HTTP 요청 단위, 미들웨어가 설정
- diff_id: 분석 세션 단위, 세션 태스크 안에서만 유효

세션은 asyncio 태스크로 실행되므로 요청 컨텍스트가 정리된 뒤에도
태스크 생성 시점에 복사된 request_id가 그대로 남는다.
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
diff_id_var: ContextVar[str | None] = ContextVar("diff_id", default=None)


def get_request_id() -> str | None:
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """
    request_id 설정

    인자가 없거나 비어 있으면 8자리 UUID 자동 생성
    """
    if not request_id:
        request_id = uuid.uuid4().hex[:8]
    request_id_var.set(request_id)
    return request_id


def get_diff_id() -> str | None:
    return diff_id_var.get()


@contextmanager
def bind_diff_id(diff_id: str) -> Iterator[str]:
    """블록 안에서만 diff_id를 설정하고 빠져나오면 이전 값으로 복원"""
    token = diff_id_var.set(diff_id)
    try:
        yield diff_id
    finally:
        diff_id_var.reset(token)


def get_log_context() -> dict[str, str]:
    """현재 설정된 컨텍스트 값만 모아 반환"""
    context = {"request_id": request_id_var.get(), "diff_id": diff_id_var.get()}
    return {key: value for key, value in context.items() if value}


def clear_context() -> None:
    """모든 컨텍스트 변수 초기화"""
    request_id_var.set(None)
    diff_id_var.set(None)
