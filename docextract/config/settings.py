from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "postgres"
    db_username: str = "postgres"
    db_password: str = "postgres"

    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_jwt_secret: str = ""
    jwt_audience: str = "authenticated"
    storage_bucket: str = "documents"
    storage_path_marker: str = "/documents/"
    storage_timeout_seconds: int = 30

    encryption_secret: str = ""
    notion_api_key: str = ""
    notion_api_base_url: str = "https://api.notion.com/v1"
    notion_api_version: str = "2022-06-28"
    notion_timeout_seconds: int = 30

    ai_provider: str = "lovable"
    ai_api_key: str = ""
    ai_model_name: str = "google/gemini-2.5-flash"
    ai_base_url: str = ""
    ai_timeout_seconds: int = 120
    ai_temperature: float = 0.0

    pdf_engine: str = "pdfplumber"
    max_file_size_mb: int = 20

    rate_limit_max_requests: int = 50
    rate_limit_window_ms: int = 60_000
    rate_limit_sweep_interval_seconds: int = 60

    cors_allow_origins: list[str] = ["*"]
