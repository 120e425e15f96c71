from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.api.routers import api_router
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.limiter import limiter
from app.core.logging import get_logger, setup_logging
from app.core.middleware import RequestLoggingMiddleware
from app.infra.github.client import close_client as close_github_client
from app.infra.llm import get_llm_client, reset_clients

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 시작/종료 이벤트 관리

    프로덕션에서는 필수 설정을 검사하고 LLM 클라이언트를 미리 만들어
    설정 오류가 첫 요청이 아니라 기동 시점에 드러나도록 한다.
    """
    if settings.is_production:
        errors = settings.validate_for_production()
        if errors:
            raise RuntimeError(f"프로덕션 설정 오류: {', '.join(errors)}")
        get_llm_client()

    logger.info(
        "서비스 시작 environment=%s provider=%s batch_size=%d",
        settings.environment,
        settings.llm_provider,
        settings.progress_batch_size,
    )
    yield

    await close_github_client()
    reset_clients()
    logger.info("서비스 종료")


app = FastAPI(
    title="Release Notes Streamer",
    version="1.0.0",
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    openapi_url=None if settings.is_production else "/openapi.json",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
# 마지막에 추가한 미들웨어가 가장 바깥에서 실행
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)
app.include_router(api_router)


@app.get("/health")
async def health_check():
    return {"status": "UP"}
