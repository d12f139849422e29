from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "stockscan"
    db_username: str = "stockscan"
    db_password: str = "secret"

    cache_backend: str = "memory"
    cache_max_age_days: int = 30
    audit_max_entries: int = 200

    preprocess_engine: str = "pillow"
    preprocess_max_edge: int = 1024
    preprocess_quality: int = 70

    qr_engine: str = "opencv"

    local_ocr_engine: str = "tesseract"
    ocr_languages: str = "spa,eng"

    ai_provider: str = "openai,gemini"

    openai_api_key: str = ""
    openai_model_name: str = "gpt-4o-mini"
    openai_timeout_seconds: int = 30

    gemini_api_key: str = ""
    gemini_model_name: str = "gemini-2.5-flash"
    gemini_timeout_seconds: int = 30

    openrouter_api_key: str = ""
    openrouter_model_name: str = ""
    openrouter_timeout_seconds: int = 30

    groq_api_key: str = ""
    groq_model_name: str = ""
    groq_timeout_seconds: int = 30

    ollama_api_key: str = ""
    ollama_model_name: str = ""
    ollama_timeout_seconds: int = 60

    openai_compatible_api_key: str = ""
    openai_compatible_model_name: str = ""
    openai_compatible_base_url: str = ""
    openai_compatible_timeout_seconds: int = 30

    assistant_recent_transactions: int = 20
