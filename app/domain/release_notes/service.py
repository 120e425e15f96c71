import asyncio

import httpx

from app.core.config import settings
from app.core.logging import get_logger
from app.domain.release_notes.relevance import filter_and_rank
from app.domain.release_notes.schemas import ChangeRecord, PRInfo
from app.infra.github.client import GITHUB_MAX_PER_PAGE, get_merged_pulls, get_pull_diff

logger = get_logger(__name__)


async def _fetch_change_record(pr: PRInfo, token: str | None) -> ChangeRecord | None:
    """PR diff 조회 후 ChangeRecord 생성, 실패하면 None"""
    try:
        diff = await get_pull_diff(pr.url, token)
    except httpx.HTTPStatusError as e:
        logger.info(
            "PR diff 스킵 pr=%d status_code=%d",
            pr.number,
            e.response.status_code,
        )
        return None
    except (httpx.RequestError, ValueError) as e:
        logger.warning("PR diff 조회 실패 pr=%d error=%s", pr.number, type(e).__name__)
        return None

    return ChangeRecord(
        id=str(pr.number),
        description=pr.title,
        diff_text=diff,
        source_url=pr.html_url,
    )


async def collect_sample_diffs(
    owner: str,
    repo: str,
    page: int = 1,
    per_page: int | None = None,
    token: str | None = None,
) -> tuple[list[ChangeRecord], bool]:
    """Merged PR의 diff를 모아 관련성 필터와 랭킹을 적용

    필터링 후에도 충분한 수가 남도록 per_page의 배수만큼 조회하고,
    diff 조회에 실패한 PR은 건너뛴다.

    Args:
        owner: 레포지토리 소유자
        repo: 레포지토리 이름
        page: 페이지 번호
        per_page: 반환할 최대 PR 수
        token: GitHub 토큰, 없으면 설정값 사용

    Returns:
        랭킹된 ChangeRecord 목록, 다음 페이지 존재 가능 여부
    """
    if per_page is None:
        per_page = settings.sample_diffs_per_page
    if token is None:
        token = settings.github_token or None

    fetch_count = min(per_page * settings.sample_diffs_fetch_multiplier, GITHUB_MAX_PER_PAGE)
    pulls = await get_merged_pulls(owner, repo, token=token, page=page, per_page=fetch_count)

    results = await asyncio.gather(
        *(_fetch_change_record(pr, token) for pr in pulls[:fetch_count])
    )
    records = [record for record in results if record is not None]

    ranked = filter_and_rank(records)[:per_page]
    logger.info(
        "샘플 diff 수집 완료 repo=%s/%s merged=%d fetched=%d returned=%d",
        owner,
        repo,
        len(pulls),
        len(records),
        len(ranked),
    )
    return ranked, len(ranked) == per_page
