from app.core.config import settings
from app.core.logging import get_logger
from app.infra.llm.base import BaseLLMClient
from app.infra.llm.gemini_client import GeminiClient
from app.infra.llm.openai_client import OpenAIClient
from app.infra.llm.vllm_client import VLLMClient

logger = get_logger(__name__)

_llm_client: BaseLLMClient | None = None


def _client_class(provider: str) -> type[BaseLLMClient]:
    classes = {
        "openai": OpenAIClient,
        "vllm": VLLMClient,
        "gemini": GeminiClient,
    }
    if provider not in classes:
        raise ValueError(f"지원하지 않는 LLM 프로바이더: {provider}")
    return classes[provider]


def get_llm_client() -> BaseLLMClient:
    """릴리스 노트 생성용 LLM 클라이언트 반환

    처음 호출될 때 한 번만 생성하고 이후 모든 세션이 읽기 전용으로 공유한다.

    Raises:
        ValueError: 지원하지 않는 프로바이더이거나 필수 설정이 없는 경우
    """
    global _llm_client

    if _llm_client is None:
        provider = settings.llm_provider.lower()
        _llm_client = _client_class(provider)()
        logger.info(
            "LLM 클라이언트 초기화 provider=%s model=%s",
            provider,
            _llm_client.get_model_name(),
        )
    return _llm_client


def reset_clients() -> None:
    """클라이언트 캐시 초기화"""
    global _llm_client
    _llm_client = None
