from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from app.core.config import settings
from app.infra.llm.base import BaseLLMClient


class VLLMClient(BaseLLMClient):
    """vLLM/RunPod 클라이언트

    OpenAI 호환 엔드포인트라서 ChatOpenAI에 base_url만 바꿔 사용한다.
    """

    provider = "vllm"

    def _check_settings(self) -> None:
        if not settings.vllm_api_url:
            raise ValueError("VLLM_API_URL이 설정되지 않았습니다")
        if not settings.vllm_model:
            raise ValueError("VLLM_MODEL이 설정되지 않았습니다")

    def _build_model(self) -> BaseChatModel:
        return ChatOpenAI(
            model=settings.vllm_model,
            api_key=settings.vllm_api_key or "EMPTY",
            base_url=settings.vllm_api_url,
            timeout=settings.vllm_timeout,
            temperature=settings.llm_temperature,
            max_retries=settings.llm_max_retries,
            streaming=True,
        )

    def get_model_name(self) -> str:
        return settings.vllm_model
