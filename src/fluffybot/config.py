from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", frozen=True)

    # GitLab
    gitlab_url: str = "https://gitlab.com"
    gitlab_token: str
    gitlab_webhook_secret: str | None = None
    bot_username: str = "fluffybot"
    gitlab_timeout: float = 30.0

    # LLM Providers
    default_provider: str = "anthropic"
    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    openai_model: str = "gpt-4o-mini"
    llm_max_tokens: int = 1024
    llm_timeout: float = 60.0

    # Worker jobs
    worker_namespace: str = "gitlab"
    worker_image: str
    worker_image_pull_secret: str | None = "fluffy-registry-secret"
    worker_cpu_request: str = "500m"
    worker_cpu_limit: str = "2"
    worker_memory_request: str = "2Gi"
    worker_memory_limit: str = "4Gi"

    log_level: str = "INFO"
