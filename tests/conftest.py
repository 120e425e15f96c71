"""테스트 공통 fixture"""

import asyncio
from unittest.mock import MagicMock

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from app.core.limiter import limiter
from app.domain.release_notes.schemas import ChangeRecord
from app.main import app


class FakeStreamer:
    """ReleaseNotesStreamer 대역 - 정해진 delta를 순서대로 반환"""

    model_name = "fake-model"

    def __init__(self, deltas=(), error: Exception | None = None, delay: float = 0.0):
        self.deltas = list(deltas)
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []
        self.yielded = 0
        self.closed = False

    async def astream(self, prompt: str, session_id: str | None = None):
        self.prompts.append(prompt)
        try:
            for delta in self.deltas:
                if self.delay:
                    await asyncio.sleep(self.delay)
                self.yielded += 1
                yield delta
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True


def make_diff(path: str = "src/parser.ts", added: int = 12, removed: int = 0) -> str:
    """unified diff 텍스트 생성"""
    lines = [
        f"diff --git a/{path} b/{path}",
        f"--- a/{path}",
        f"+++ b/{path}",
        "@@ -1,3 +1,3 @@",
    ]
    lines += [f"+const added{i} = {i};" for i in range(added)]
    lines += [f"-const removed{i} = {i};" for i in range(removed)]
    return "\n".join(lines)


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """테스트 간 요청 제한 카운터 초기화"""
    limiter.reset()
    yield


@pytest.fixture
def fix_record() -> ChangeRecord:
    """테스트용 버그 수정 PR"""
    return ChangeRecord(
        id="101",
        description="fix: null pointer in parser",
        diff_text=make_diff(added=12),
        source_url="https://github.com/openai/openai-node/pull/101",
    )


@pytest.fixture
def docs_record() -> ChangeRecord:
    """테스트용 문서 PR"""
    return ChangeRecord(
        id="102",
        description="docs: update readme",
        diff_text=make_diff(path="README.md", added=3),
        source_url="https://github.com/openai/openai-node/pull/102",
    )


@pytest.fixture
def notes_json_deltas() -> list[str]:
    """JSON 노트를 여러 조각으로 나눈 LLM 출력"""
    return [
        '{"developer": ',
        '"Fixed a null ',
        'pointer in the parser.", ',
        '"marketing": "Parsing ',
        'is more reliable."}',
    ]


@pytest.fixture
def async_client():
    """비동기 HTTP 클라이언트"""
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture
def mock_github_response():
    """GitHub API 응답 mock 생성"""
    mock = MagicMock()
    mock.raise_for_status = MagicMock()
    return mock


@pytest.fixture
def create_http_error():
    """HTTPStatusError 생성 helper"""

    def _create(status_code: int, message: str = "Error"):
        return httpx.HTTPStatusError(
            message,
            request=httpx.Request("GET", "https://test.com"),
            response=httpx.Response(status_code),
        )

    return _create


@pytest.fixture
def fake_streamer():
    """FakeStreamer 생성 helper"""
    return FakeStreamer


@pytest.fixture
def diff_factory():
    """unified diff 생성 helper"""
    return make_diff
