from unittest.mock import AsyncMock, patch

import httpx
import pytest

from app.domain.release_notes.schemas import PRInfo
from app.domain.release_notes.service import collect_sample_diffs


def _pr(number: int, title: str) -> PRInfo:
    return PRInfo(
        number=number,
        title=title,
        url=f"https://api.github.com/repos/o/r/pulls/{number}",
        html_url=f"https://github.com/o/r/pull/{number}",
        merged_at="2024-01-01T00:00:00Z",
    )


class TestCollectSampleDiffs:
    """collect_sample_diffs 함수 테스트."""

    @pytest.mark.asyncio
    async def test_filters_and_ranks(self, diff_factory):
        """문서 PR 제외 후 점수 내림차순 정렬."""
        pulls = [
            _pr(1, "update parser"),
            _pr(2, "docs: guide"),
            _pr(3, "fix: crash on empty body"),
            _pr(4, "feat: breaking change to client"),
        ]

        with (
            patch(
                "app.domain.release_notes.service.get_merged_pulls",
                new_callable=AsyncMock,
                return_value=pulls,
            ) as mock_pulls,
            patch(
                "app.domain.release_notes.service.get_pull_diff",
                new_callable=AsyncMock,
                return_value=diff_factory(added=20),
            ),
        ):
            records, has_more = await collect_sample_diffs("o", "r", page=2, per_page=5)

        assert [r.id for r in records] == ["4", "3", "1"]
        assert records[0].source_url == "https://github.com/o/r/pull/4"
        assert has_more is False
        mock_pulls.assert_awaited_once_with("o", "r", token=None, page=2, per_page=15)

    @pytest.mark.asyncio
    async def test_fetch_count_capped(self):
        """조회 개수는 GitHub 페이지 한도(100)를 넘지 않음."""
        with (
            patch(
                "app.domain.release_notes.service.get_merged_pulls",
                new_callable=AsyncMock,
                return_value=[],
            ) as mock_pulls,
            patch("app.domain.release_notes.service.get_pull_diff", new_callable=AsyncMock) as mock_diff,
        ):
            records, has_more = await collect_sample_diffs("o", "r", per_page=50)

        assert records == []
        assert has_more is False
        mock_pulls.assert_awaited_once_with("o", "r", token=None, page=1, per_page=100)
        mock_diff.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_truncates_to_per_page(self, diff_factory):
        """per_page개까지만 반환하고 has_more 표시."""
        pulls = [_pr(i, f"fix: bug {i}") for i in range(1, 7)]

        with (
            patch("app.domain.release_notes.service.get_merged_pulls", new_callable=AsyncMock, return_value=pulls),
            patch(
                "app.domain.release_notes.service.get_pull_diff",
                new_callable=AsyncMock,
                return_value=diff_factory(),
            ),
        ):
            records, has_more = await collect_sample_diffs("o", "r", per_page=2)

        assert [r.id for r in records] == ["1", "2"]
        assert has_more is True

    @pytest.mark.asyncio
    async def test_skips_failed_diffs(self, diff_factory, create_http_error):
        """diff 조회 실패(403, 네트워크 오류)한 PR은 건너뜀."""
        pulls = [_pr(1, "fix: a"), _pr(2, "fix: b"), _pr(3, "fix: c")]

        async def fake_diff(url, token=None):
            if url.endswith("/1"):
                raise create_http_error(403, "Forbidden")
            if url.endswith("/2"):
                raise httpx.ConnectError("connection refused")
            return diff_factory()

        with (
            patch("app.domain.release_notes.service.get_merged_pulls", new_callable=AsyncMock, return_value=pulls),
            patch("app.domain.release_notes.service.get_pull_diff", side_effect=fake_diff),
        ):
            records, has_more = await collect_sample_diffs("o", "r", per_page=5)

        assert [r.id for r in records] == ["3"]
        assert has_more is False

    @pytest.mark.asyncio
    async def test_listing_error_propagates(self, create_http_error):
        """PR 목록 조회 실패는 호출자에게 전파."""
        with patch(
            "app.domain.release_notes.service.get_merged_pulls",
            new_callable=AsyncMock,
            side_effect=create_http_error(404, "Not Found"),
        ):
            with pytest.raises(httpx.HTTPStatusError):
                await collect_sample_diffs("o", "missing")
