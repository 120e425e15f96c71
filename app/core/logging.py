"""
structlog 기반 로깅 설정

- 개발 환경: 컬러 콘솔 출력 / 프로덕션 환경: JSON 한 줄 출력
- request_id, diff_id 자동 주입
- diff 본문이나 LLM 버퍼처럼 긴 문자열은 잘라서 기록
- 프로덕션에서는 토큰/API 키 마스킹
"""

import logging
import re
import sys

import structlog

from app.core.config import settings
from app.core.context import get_log_context

MAX_LOG_VALUE_LENGTH = 500

SENSITIVE_PATTERNS = [
    (re.compile(r"(token=)[^&\s]+", re.IGNORECASE), r"\1***"),
    (re.compile(r"(Bearer\s+)[^\s]+", re.IGNORECASE), r"\1***"),
    (re.compile(r"(api[_-]?key=)[^&\s]+", re.IGNORECASE), r"\1***"),
    (re.compile(r"\b(sk-)[A-Za-z0-9_-]{8,}"), r"\1***"),
    (re.compile(r"\b(gh[pousr]_)[A-Za-z0-9]{8,}"), r"\1***"),
]

NOISY_LOGGERS = (
    "httpcore",
    "httpx",
    "openai",
    "langchain",
    "langfuse",
    "google_genai",
    "anyio",
)


def mask_sensitive_data(value: str) -> str:
    for pattern, replacement in SENSITIVE_PATTERNS:
        value = pattern.sub(replacement, value)
    return value


def add_context_processor(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """컨텍스트 값 주입 - 호출 시 명시한 값이 우선"""
    for key, value in get_log_context().items():
        event_dict.setdefault(key, value)
    return event_dict


def truncate_long_values(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """event 메시지를 제외한 긴 문자열 값 자르기"""
    for key, value in event_dict.items():
        if key != "event" and isinstance(value, str) and len(value) > MAX_LOG_VALUE_LENGTH:
            event_dict[key] = f"{value[:MAX_LOG_VALUE_LENGTH]}...(+{len(value) - MAX_LOG_VALUE_LENGTH})"
    return event_dict


def mask_sensitive_processor(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """프로덕션에서 민감한 정보 마스킹"""
    if not settings.is_production:
        return event_dict

    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = mask_sensitive_data(value)
    return event_dict


def _shared_processors(json_logs: bool) -> list:
    processors: list = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        add_context_processor,
        truncate_long_values,
        mask_sensitive_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_logs:
        processors.append(structlog.processors.format_exc_info)
    return processors


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """structlog 설정 초기화

    Args:
        level: 로그 레벨, 없으면 설정값 사용
        json_logs: JSON 출력 여부, 없으면 프로덕션일 때만 JSON
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    if json_logs is None:
        json_logs = settings.is_production

    shared_processors = _shared_processors(json_logs)
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # uvicorn 자체 핸들러를 지워 root 핸들러 하나로 출력
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).handlers.clear()

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
