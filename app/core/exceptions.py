from enum import Enum

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.requests import ClientDisconnect

from app.core.config import settings

CLIENT_CLOSED_REQUEST = 499

ABORT_ERROR_TYPES = (
    ConnectionResetError,
    ConnectionAbortedError,
    BrokenPipeError,
    ClientDisconnect,
)
ABORT_MESSAGE_MARKERS = ("aborted", "econnreset")


class ErrorCode(str, Enum):
    """에러 코드 열거형"""

    GITHUB_UNAUTHORIZED = "GITHUB_UNAUTHORIZED"
    GITHUB_NOT_FOUND = "GITHUB_NOT_FOUND"
    GITHUB_API_ERROR = "GITHUB_API_ERROR"
    LLM_CONFIG_ERROR = "LLM_CONFIG_ERROR"
    STREAM_TIMEOUT = "STREAM_TIMEOUT"
    INVALID_INPUT = "INVALID_INPUT"


class CustomException(Exception):
    def __init__(
        self,
        status_code: int,
        error_code: ErrorCode | str,
        message: str,
        detail: str | None = None,
    ):
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.detail = detail
        super().__init__(message)


class GitHubAPIError(CustomException):
    """GitHub 호출 실패 - 원인과 무관하게 502, error_code로 구분"""

    def __init__(
        self,
        detail: str | None = None,
        error_code: ErrorCode = ErrorCode.GITHUB_API_ERROR,
    ):
        super().__init__(
            status_code=502,
            error_code=error_code,
            message="GitHub API 호출에 실패했습니다",
            detail=detail,
        )


class LLMConfigError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=500,
            error_code=ErrorCode.LLM_CONFIG_ERROR,
            message="LLM 클라이언트를 초기화할 수 없습니다",
            detail=detail,
        )


class StreamTimeoutError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=504,
            error_code=ErrorCode.STREAM_TIMEOUT,
            message="LLM 스트림 응답 시간이 초과되었습니다",
            detail=detail,
        )


class ValidationError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=400,
            error_code=ErrorCode.INVALID_INPUT,
            message="입력값이 올바르지 않습니다",
            detail=detail,
        )


def is_abort_error(exc: BaseException) -> bool:
    """클라이언트 연결 종료로 인한 예외인지 판단"""
    if isinstance(exc, ABORT_ERROR_TYPES):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in ABORT_MESSAGE_MARKERS)


def register_exception_handlers(app):
    @app.exception_handler(CustomException)
    async def custom_exception_handler(request: Request, exc: CustomException):
        content = {
            "error_code": exc.error_code,
            "message": exc.message,
        }
        if exc.detail and not settings.is_production:
            content["detail"] = exc.detail

        return JSONResponse(
            status_code=exc.status_code,
            content=content,
        )

    @app.exception_handler(ClientDisconnect)
    async def client_disconnect_handler(request: Request, exc: ClientDisconnect):
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # 본문 파싱/타입 오류도 INVALID_INPUT(400)으로 통일
        detail = "; ".join(
            f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        return await custom_exception_handler(request, ValidationError(detail=detail))
