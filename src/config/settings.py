from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    groq_api_key: str | None = None
    openai_api_key: str | None = None
    app_host: str = "0.0.0.0"
    port: int = 5174
    log_level: str = "INFO"
    log_file: str = "server.log"
    upstream_timeout: float = 15.0
    max_body_bytes: int = 1024 * 1024


settings = Settings()
