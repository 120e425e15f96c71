from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from app.core.config import settings
from app.infra.llm.base import BaseLLMClient


class OpenAIClient(BaseLLMClient):
    """OpenAI API 클라이언트 - 기본 프로바이더"""

    provider = "openai"

    def _check_settings(self) -> None:
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY가 설정되지 않았습니다")

    def _build_model(self) -> BaseChatModel:
        return ChatOpenAI(
            model=settings.openai_model,
            api_key=settings.openai_api_key,
            timeout=settings.openai_timeout,
            temperature=settings.llm_temperature,
            max_retries=settings.llm_max_retries,
            streaming=True,
        )

    def get_model_name(self) -> str:
        return settings.openai_model
