import httpx
from fastapi import APIRouter, Query, Request
from fastapi.responses import Response, StreamingResponse

from app.api.v1.schemas import AnalyzeRequest, SampleDiff, SampleDiffsResponse
from app.core.config import settings
from app.core.exceptions import (
    CLIENT_CLOSED_REQUEST,
    ErrorCode,
    GitHubAPIError,
    LLMConfigError,
    ValidationError,
)
from app.core.logging import get_logger
from app.domain.release_notes.service import collect_sample_diffs
from app.domain.release_notes.session import ReleaseNotesSession
from app.infra.github.client import parse_repo_url
from app.infra.llm.client import get_notes_streamer
from app.infra.sse.channel import EventChannel

router = APIRouter(prefix="/release-notes", tags=["release-notes"])
logger = get_logger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

GITHUB_STATUS_ERROR_CODES = {
    401: ErrorCode.GITHUB_UNAUTHORIZED,
    404: ErrorCode.GITHUB_NOT_FOUND,
}


def _github_error(exc: httpx.HTTPError) -> GitHubAPIError:
    """GitHub 응답 상태 코드를 error_code로 구분"""
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        return GitHubAPIError(
            detail=f"status_code={status_code}",
            error_code=GITHUB_STATUS_ERROR_CODES.get(status_code, ErrorCode.GITHUB_API_ERROR),
        )
    return GitHubAPIError(detail=type(exc).__name__)


@router.post("/analyze")
async def analyze_diff(request: Request, body: AnalyzeRequest):
    """diff를 분석해 릴리스 노트를 SSE로 스트리밍"""
    if not body.diff_content:
        raise ValidationError(detail="diffContent는 필수입니다")

    try:
        streamer = get_notes_streamer()
    except ValueError as e:
        logger.error("LLM 클라이언트 초기화 실패 error=%s", e)
        raise LLMConfigError(detail=str(e)) from e

    if await request.is_disconnected():
        logger.info("세션 시작 전 클라이언트 연결 종료 diff_id=%s", body.diff_id)
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    channel = EventChannel()
    session = ReleaseNotesSession(body.to_change_record(), channel, streamer)
    session.start()

    logger.info(
        "분석 세션 시작 diff_id=%s diff_length=%d",
        body.diff_id,
        len(body.diff_content),
    )
    return StreamingResponse(
        channel.frames(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/sample-diffs", response_model=SampleDiffsResponse)
async def get_sample_diffs(
    owner: str | None = None,
    repo: str | None = None,
    repo_url: str | None = Query(default=None, alias="repoUrl"),
    page: int = 1,
    per_page: int | None = Query(default=None, alias="perPage"),
) -> SampleDiffsResponse:
    """관련성 필터와 랭킹을 적용한 Merged PR diff 목록"""
    if page < 1:
        raise ValidationError(detail="page는 1 이상이어야 합니다")
    if per_page is None:
        per_page = settings.sample_diffs_per_page
    if not 1 <= per_page <= settings.sample_diffs_max_per_page:
        raise ValidationError(
            detail=f"perPage는 1 이상 {settings.sample_diffs_max_per_page} 이하여야 합니다"
        )

    try:
        if repo_url:
            owner, repo = parse_repo_url(repo_url)
        owner = owner or settings.github_default_owner
        repo = repo or settings.github_default_repo

        records, has_more = await collect_sample_diffs(owner, repo, page=page, per_page=per_page)

    except ValueError as e:
        raise ValidationError(detail=str(e)) from e

    except httpx.HTTPError as e:
        logger.error("샘플 diff 조회 실패 repo=%s/%s error=%s", owner, repo, type(e).__name__)
        raise _github_error(e) from e

    return SampleDiffsResponse(
        owner=owner,
        repo=repo,
        page=page,
        per_page=per_page,
        diffs=[SampleDiff.from_record(record) for record in records],
        has_more=has_more,
    )
