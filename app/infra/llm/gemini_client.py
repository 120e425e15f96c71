from langchain_core.language_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI

from app.core.config import settings
from app.infra.llm.base import BaseLLMClient


class GeminiClient(BaseLLMClient):
    provider = "gemini"

    def _check_settings(self) -> None:
        if not settings.gemini_api_key:
            raise ValueError("GEMINI_API_KEY가 설정되지 않았습니다")

    def _build_model(self) -> BaseChatModel:
        return ChatGoogleGenerativeAI(
            model=settings.gemini_model,
            google_api_key=settings.gemini_api_key,
            timeout=settings.gemini_timeout,
            temperature=settings.llm_temperature,
            max_retries=settings.llm_max_retries,
        )

    def get_model_name(self) -> str:
        return settings.gemini_model
