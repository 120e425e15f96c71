from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 설정"""

    environment: str = "development"

    # LLM 프로바이더 선택: "openai", "vllm", "gemini"
    llm_provider: str = "openai"

    # OpenAI 설정 - 기본
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_timeout: float = 120.0

    # vLLM/RunPod 설정 - OpenAI 호환 엔드포인트
    vllm_api_url: str = ""
    vllm_api_key: str = ""
    vllm_model: str = ""
    vllm_timeout: float = 180.0

    # Gemini 설정
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_timeout: float = 120.0

    # 낮은 temperature로 결정적인 출력 유도
    llm_temperature: float = 0.2
    llm_max_retries: int = 2

    # GitHub
    github_token: str = ""
    github_timeout: float = 60.0
    github_max_concurrent_requests: int = 5
    github_default_owner: str = "openai"
    github_default_repo: str = "openai-node"

    # 샘플 diff 조회 설정
    sample_diffs_per_page: int = 5
    sample_diffs_fetch_multiplier: int = 3
    sample_diffs_max_per_page: int = 30

    # 스트리밍 파이프라인 설정
    diff_max_length: int = 12000
    progress_batch_size: int = 5
    stream_idle_timeout: float = 60.0
    stream_total_timeout: float = 300.0

    # 요청 제한
    rate_limit_default: str = "60/minute"

    # 로깅 설정
    log_level: str = "INFO"

    # Langfuse 설정
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_base_url: str = "https://cloud.langfuse.com"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def validate_for_production(self) -> list[str]:
        """선택된 프로바이더 기준으로 누락된 필수 설정 반환"""
        errors = []
        provider = self.llm_provider.lower()
        if provider == "openai" and not self.openai_api_key:
            errors.append("OPENAI_API_KEY")
        if provider == "vllm" and not self.vllm_api_url:
            errors.append("VLLM_API_URL")
        if provider == "vllm" and not self.vllm_model:
            errors.append("VLLM_MODEL")
        if provider == "gemini" and not self.gemini_api_key:
            errors.append("GEMINI_API_KEY")
        if not self.github_token:
            errors.append("GITHUB_TOKEN")
        return errors

    @model_validator(mode="after")
    def validate_production_settings(self):
        """프로덕션 환경에서 필수 설정 검증"""
        if self.is_production:
            missing = self.validate_for_production()
            if missing:
                raise ValueError(f"프로덕션 환경에서 필수 설정 누락: {', '.join(missing)}")
        return self


settings = Settings()
