"""GitHub 클라이언트 테스트"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.infra.github.client import (
    GITHUB_DIFF_MEDIA_TYPE,
    _get_headers,
    get_merged_pulls,
    get_pull_diff,
    parse_repo_url,
    validate_repo_name,
)


class TestParseRepoUrl:
    """parse_repo_url 함수 테스트"""

    @pytest.mark.parametrize(
        "url,expected_owner,expected_repo",
        [
            ("https://github.com/openai/openai-node", "openai", "openai-node"),
            ("https://github.com/user/my-repo.git", "user", "my-repo"),
            ("https://github.com/user/my-repo/", "user", "my-repo"),
            ("https://github.com/org-name/repo_name", "org-name", "repo_name"),
        ],
    )
    def test_valid_urls(self, url, expected_owner, expected_repo):
        """유효한 GitHub URL 파싱"""
        owner, repo = parse_repo_url(url)
        assert owner == expected_owner
        assert repo == expected_repo

    @pytest.mark.parametrize(
        "invalid_url",
        ["invalid-url", "https://gitlab.com/user/repo", "https://github.com/user", ""],
    )
    def test_invalid_urls(self, invalid_url):
        """유효하지 않은 URL은 ValueError 발생"""
        with pytest.raises(ValueError, match="유효하지 않은 GitHub URL"):
            parse_repo_url(invalid_url)


class TestValidateRepoName:
    """validate_repo_name 함수 테스트"""

    def test_valid(self):
        """허용 문자로만 구성된 이름"""
        assert validate_repo_name("openai", "openai-node") == ("openai", "openai-node")

    @pytest.mark.parametrize(
        "owner,repo",
        [("user", "repo/../x"), ("..", "repo"), ("user name", "repo"), ("user", "")],
    )
    def test_invalid(self, owner, repo):
        """경로 조작 문자나 공백은 거부"""
        with pytest.raises(ValueError, match="유효하지 않은 레포지토리 이름"):
            validate_repo_name(owner, repo)


class TestGetHeaders:
    """_get_headers 함수 테스트"""

    def test_without_token(self):
        """토큰 없이 헤더 생성"""
        headers = _get_headers()
        assert headers == {"Accept": "application/vnd.github.v3+json"}

    def test_with_token(self):
        """토큰 포함 헤더 생성"""
        headers = _get_headers("test-token")
        assert headers["Authorization"] == "Bearer test-token"

    def test_diff_media_type(self):
        """diff 조회용 Accept 헤더"""
        assert _get_headers(accept=GITHUB_DIFF_MEDIA_TYPE)["Accept"] == GITHUB_DIFF_MEDIA_TYPE


class TestGetMergedPulls:
    """get_merged_pulls 함수 테스트"""

    @pytest.mark.asyncio
    async def test_filters_unmerged(self, mock_github_response):
        """merged_at이 없는 PR은 제외"""
        mock_github_response.json.return_value = [
            {
                "number": 1,
                "title": "fix: crash",
                "url": "https://api.github.com/repos/o/r/pulls/1",
                "html_url": "https://github.com/o/r/pull/1",
                "merged_at": "2024-01-01T00:00:00Z",
            },
            {
                "number": 2,
                "title": "closed without merge",
                "url": "https://api.github.com/repos/o/r/pulls/2",
                "html_url": "https://github.com/o/r/pull/2",
                "merged_at": None,
            },
        ]

        with patch("app.infra.github.client._client") as mock_client:
            mock_client.get = AsyncMock(return_value=mock_github_response)
            result = await get_merged_pulls("o", "r", "token", page=2, per_page=15)

        assert [pr.number for pr in result] == [1]
        assert result[0].html_url == "https://github.com/o/r/pull/1"

        _, kwargs = mock_client.get.call_args
        assert kwargs["params"] == {"state": "closed", "per_page": 15, "page": 2}
        assert kwargs["headers"]["Authorization"] == "Bearer token"

    @pytest.mark.asyncio
    async def test_per_page_capped(self, mock_github_response):
        """GitHub 최대 페이지 크기 100으로 제한"""
        mock_github_response.json.return_value = []

        with patch("app.infra.github.client._client") as mock_client:
            mock_client.get = AsyncMock(return_value=mock_github_response)
            await get_merged_pulls("o", "r", per_page=500)

        _, kwargs = mock_client.get.call_args
        assert kwargs["params"]["per_page"] == 100

    @pytest.mark.asyncio
    async def test_http_error(self, mock_github_response, create_http_error):
        """API 오류는 HTTPStatusError 전파"""
        mock_github_response.raise_for_status.side_effect = create_http_error(404, "Not Found")

        with patch("app.infra.github.client._client") as mock_client:
            mock_client.get = AsyncMock(return_value=mock_github_response)
            with pytest.raises(httpx.HTTPStatusError):
                await get_merged_pulls("o", "missing")

    @pytest.mark.asyncio
    async def test_invalid_repo_name(self):
        """잘못된 이름은 요청 전에 거부"""
        with patch("app.infra.github.client._client") as mock_client:
            mock_client.get = AsyncMock()
            with pytest.raises(ValueError):
                await get_merged_pulls("o", "../etc")

        mock_client.get.assert_not_called()


class TestGetPullDiff:
    """get_pull_diff 함수 테스트"""

    @pytest.mark.asyncio
    async def test_success(self):
        """diff 미디어 타입으로 raw diff 조회"""
        mock_response = MagicMock()
        mock_response.text = "diff --git a/x b/x\n+added"
        mock_response.raise_for_status = MagicMock()

        with patch("app.infra.github.client._client") as mock_client:
            mock_client.get = AsyncMock(return_value=mock_response)
            result = await get_pull_diff("https://api.github.com/repos/o/r/pulls/1", "token")

        assert result == "diff --git a/x b/x\n+added"
        _, kwargs = mock_client.get.call_args
        assert kwargs["headers"]["Accept"] == GITHUB_DIFF_MEDIA_TYPE

    @pytest.mark.asyncio
    async def test_rejects_non_api_url(self):
        """GitHub API가 아닌 URL은 ValueError"""
        with pytest.raises(ValueError, match="GitHub API URL"):
            await get_pull_diff("https://example.com/repos/o/r/pulls/1")

    @pytest.mark.asyncio
    async def test_http_error(self, create_http_error):
        """403 등 API 오류 전파"""
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = create_http_error(403, "Forbidden")

        with patch("app.infra.github.client._client") as mock_client:
            mock_client.get = AsyncMock(return_value=mock_response)
            with pytest.raises(httpx.HTTPStatusError):
                await get_pull_diff("https://api.github.com/repos/o/r/pulls/1")
