"""
HTTP 요청 로깅 미들웨어

- request_id 생성 또는 X-Request-ID 헤더 값 전파
- 요청 시작/완료/실패 로깅
- 응답 본문을 감싸지 않는 순수 ASGI 미들웨어라서 SSE 응답도
  스트림이 끝난 시점의 소요 시간과 전송 바이트를 기록한다
"""

import time

from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.context import clear_context, set_request_id
from app.core.logging import get_logger

logger = get_logger(__name__)

SKIP_PATHS = {"/health", "/docs", "/openapi.json", "/redoc", "/favicon.ico"}
EVENT_STREAM_MEDIA_TYPE = "text/event-stream"
REQUEST_ID_HEADER = "X-Request-ID"


def _get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware:
    """HTTP 요청 로깅 및 request_id 관리 미들웨어"""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] in SKIP_PATHS:
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        start_time = time.perf_counter()
        response = {"status_code": 500, "streaming": False, "bytes": 0}

        logger.info(
            "요청 시작",
            method=request.method,
            path=request.url.path,
            client_ip=_get_client_ip(request),
        )

        async def send_with_logging(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers[REQUEST_ID_HEADER] = request_id
                response["status_code"] = message["status"]
                response["streaming"] = headers.get("content-type", "").startswith(EVENT_STREAM_MEDIA_TYPE)
            elif message["type"] == "http.response.body":
                response["bytes"] += len(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive, send_with_logging)
        except Exception as e:
            logger.error(
                "요청 실패",
                method=request.method,
                path=request.url.path,
                error=str(e),
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise
        else:
            logger.info(
                "요청 완료",
                method=request.method,
                path=request.url.path,
                status_code=response["status_code"],
                streaming=response["streaming"],
                response_bytes=response["bytes"],
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
        finally:
            clear_context()
