from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage


def chunk_text(chunk: Any) -> str:
    """스트림 청크에서 텍스트만 추출

    content가 문자열이 아닌 블록 리스트로 오는 프로바이더도 처리한다.
    """
    content = getattr(chunk, "content", chunk)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return ""


class BaseLLMClient(ABC):
    """스트리밍 채팅 모델 클라이언트

    하위 클래스는 설정 검증과 모델 생성만 구현하고,
    청크를 텍스트 delta로 바꾸는 부분은 공통으로 처리한다.
    """

    provider: str = ""

    def __init__(self):
        self._check_settings()
        self._model = self._build_model()

    @abstractmethod
    def _check_settings(self) -> None:
        """필수 설정이 없으면 ValueError"""

    @abstractmethod
    def _build_model(self) -> BaseChatModel:
        """스트리밍용 LangChain 채팅 모델 생성"""

    @abstractmethod
    def get_model_name(self) -> str:
        pass

    def get_chat_model(self) -> BaseChatModel:
        return self._model

    async def stream_text(
        self,
        messages: Sequence[BaseMessage],
        config: dict | None = None,
    ) -> AsyncIterator[str]:
        """메시지를 스트리밍 모드로 전송하고 비어 있지 않은 텍스트 delta만 반환"""
        async for chunk in self._model.astream(messages, config=config):
            text = chunk_text(chunk)
            if text:
                yield text
