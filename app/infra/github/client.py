import asyncio
import re

import httpx

from app.core.config import settings
from app.core.logging import get_logger
from app.domain.release_notes.schemas import PRInfo

logger = get_logger(__name__)

GITHUB_API_BASE = "https://api.github.com"
GITHUB_DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"
GITHUB_MAX_PER_PAGE = 100

GITHUB_URL_PATTERN = re.compile(r"github\.com/([a-zA-Z0-9_.-]+)/([a-zA-Z0-9_.-]+)")
GITHUB_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+$")

_client = httpx.AsyncClient(timeout=settings.github_timeout)
_request_semaphore = asyncio.Semaphore(settings.github_max_concurrent_requests)


def _get_headers(token: str | None = None, accept: str = "application/vnd.github.v3+json") -> dict[str, str]:
    """GitHub API 요청 헤더 생성

    Args:
        token: GitHub 토큰
        accept: 응답 미디어 타입

    Returns:
        HTTP 헤더 딕셔너리
    """
    headers = {"Accept": accept}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


async def close_client():
    """httpx 클라이언트 종료"""
    await _client.aclose()


def parse_repo_url(repo_url: str) -> tuple[str, str]:
    """GitHub URL에서 owner와 repo 추출

    Raises:
        ValueError: 유효하지 않은 GitHub URL인 경우
    """
    match = GITHUB_URL_PATTERN.search(repo_url)
    if not match:
        raise ValueError(f"유효하지 않은 GitHub URL: {repo_url}")
    owner = match.group(1)
    repo = match.group(2).replace(".git", "")
    return owner, repo


def validate_repo_name(owner: str, repo: str) -> tuple[str, str]:
    """owner/repo 이름 검증

    Raises:
        ValueError: 허용되지 않는 문자가 포함된 경우
    """
    for name in (owner, repo):
        if not GITHUB_NAME_PATTERN.match(name) or ".." in name:
            raise ValueError(f"유효하지 않은 레포지토리 이름: {owner}/{repo}")
    return owner, repo


async def get_merged_pulls(
    owner: str,
    repo: str,
    token: str | None = None,
    page: int = 1,
    per_page: int = 15,
) -> list[PRInfo]:
    """레포지토리 Merged PR 목록 조회

    closed 상태 PR 한 페이지를 조회한 뒤 merge된 것만 남긴다.

    Args:
        owner: 레포지토리 소유자
        repo: 레포지토리 이름
        token: GitHub 토큰
        page: 페이지 번호, 1부터 시작
        per_page: 페이지당 PR 개수

    Returns:
        Merged PR 목록

    Raises:
        httpx.HTTPStatusError: GitHub API 호출 실패 시
    """
    validate_repo_name(owner, repo)
    url = f"{GITHUB_API_BASE}/repos/{owner}/{repo}/pulls"
    params = {"state": "closed", "per_page": min(per_page, GITHUB_MAX_PER_PAGE), "page": page}

    async with _request_semaphore:
        response = await _client.get(url, headers=_get_headers(token), params=params)
    response.raise_for_status()
    data = response.json()

    prs = [
        PRInfo(
            number=pr["number"],
            title=pr["title"],
            url=pr["url"],
            html_url=pr["html_url"],
            merged_at=pr["merged_at"],
        )
        for pr in data
        if pr.get("merged_at")
    ]

    logger.info(
        "Merged PR 조회 완료 repo=%s/%s page=%d closed=%d merged=%d",
        owner,
        repo,
        page,
        len(data),
        len(prs),
    )
    return prs


async def get_pull_diff(pull_api_url: str, token: str | None = None) -> str:
    """PR의 raw diff 텍스트 조회

    Args:
        pull_api_url: PR API URL (pulls 응답의 url 필드)
        token: GitHub 토큰

    Returns:
        unified diff 문자열

    Raises:
        ValueError: GitHub API URL이 아닌 경우
        httpx.HTTPStatusError: GitHub API 호출 실패 시
    """
    if not pull_api_url.startswith(f"{GITHUB_API_BASE}/"):
        raise ValueError(f"GitHub API URL이 아닙니다: {pull_api_url}")

    async with _request_semaphore:
        response = await _client.get(
            pull_api_url,
            headers=_get_headers(token, accept=GITHUB_DIFF_MEDIA_TYPE),
        )
    response.raise_for_status()

    logger.debug("PR diff 조회 완료 url=%s size=%d", pull_api_url, len(response.text))
    return response.text
