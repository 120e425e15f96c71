"""릴리스 노트 세션에 주입되는 LLM 스트리밍 호출"""

import os
from collections.abc import AsyncIterator

from langchain_core.messages import HumanMessage, SystemMessage
from langfuse.langchain import CallbackHandler

from app.core.config import settings
from app.core.logging import get_logger
from app.domain.release_notes.prompts import RELEASE_NOTES_SYSTEM
from app.infra.llm.base import BaseLLMClient
from app.infra.llm.factory import get_llm_client

logger = get_logger(__name__)

LANGFUSE_TAGS = ["release-notes", "stream"]

if settings.langfuse_public_key:
    os.environ["LANGFUSE_PUBLIC_KEY"] = settings.langfuse_public_key
if settings.langfuse_secret_key:
    os.environ["LANGFUSE_SECRET_KEY"] = settings.langfuse_secret_key
if settings.langfuse_base_url:
    os.environ["LANGFUSE_HOST"] = settings.langfuse_base_url


def get_langfuse_handler() -> CallbackHandler | None:
    """Langfuse 키가 모두 있을 때만 콜백 핸들러 반환"""
    if not settings.langfuse_public_key or not settings.langfuse_secret_key:
        return None
    return CallbackHandler()


class ReleaseNotesStreamer:
    """시스템 프롬프트와 트레이싱 설정을 붙여 LLM 스트림을 여는 객체

    세션은 이 객체의 astream만 사용하므로 테스트에서는 같은 시그니처의
    대역으로 바꿔 끼울 수 있다.
    """

    def __init__(self, client: BaseLLMClient):
        self._client = client

    @property
    def model_name(self) -> str:
        return self._client.get_model_name()

    async def astream(self, prompt: str, session_id: str | None = None) -> AsyncIterator[str]:
        """프롬프트를 스트리밍 모드로 전송하고 텍스트 delta를 순서대로 반환

        Args:
            prompt: build_prompt로 렌더링한 프롬프트
            session_id: Langfuse 세션 ID, 보통 diffId

        Yields:
            비어 있지 않은 텍스트 조각
        """
        langfuse_handler = get_langfuse_handler()
        config = {
            "callbacks": [langfuse_handler] if langfuse_handler else [],
            "metadata": {
                "langfuse_session_id": session_id,
                "langfuse_tags": LANGFUSE_TAGS,
            },
            "run_name": "release_notes_stream",
        }
        messages = [
            SystemMessage(content=RELEASE_NOTES_SYSTEM),
            HumanMessage(content=prompt),
        ]

        logger.debug("LLM 스트림 요청 model=%s prompt_length=%d", self.model_name, len(prompt))
        async for text in self._client.stream_text(messages, config=config):
            yield text


def get_notes_streamer() -> ReleaseNotesStreamer:
    """공유 LLM 클라이언트로 스트리머 생성

    Raises:
        ValueError: LLM 클라이언트를 만들 수 없는 경우
    """
    return ReleaseNotesStreamer(get_llm_client())
