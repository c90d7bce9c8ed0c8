from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    server_host: str = "0.0.0.0"
    server_port: int = 8000

    dify_api_key: str = ""
    dify_file_upload_endpoint: str = "https://api.dify.ai/v1/files/upload"
    dify_workflow_endpoint: str = "https://api.dify.ai/v1/workflows/run"
    dify_workflow_status_endpoint: str = "https://api.dify.ai/v1/workflows/run/:workflow_id"
    dify_workflow_id: str = ""
    dify_user: str = "receipt-scanner"
    dify_output_key: str = "成功"
    dify_timeout_seconds: int = 60

    analysis_client: str = "proxy"
    analysis_proxy_base_url: str = ""
    analysis_timeout_seconds: int = 90
    poll_interval_seconds: float = 1.0
    max_poll_attempts: int = 30

    cache_ttl_seconds: int = 300
    fingerprint_bytes: int = 1024

    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_mime_types: list[str] = Field(
        default_factory=lambda: ["image/jpeg", "image/png", "image/webp"]
    )
    image_max_side: int = 1200
    image_quality: int = 80
    max_uploads: int = 5
