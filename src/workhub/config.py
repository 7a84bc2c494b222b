from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # MongoDB URL including database name, e.g. mongodb://localhost/workhub
    host: str
    port: int
    debug: bool
    cors_origins: list[str] = []
    admin_token: str | None = None  # Bearer token required for write endpoints (open when unset)
    counter_retry_attempts: int = 5  # Attempts for atomic counter/statistics upserts before giving up
    default_country: str = "Indonesia"
    default_timezone: str = "Asia/Jakarta"
    # Build metadata injected during Docker build via environment variables
    git_commit_hash: str = "unknown"
    build_time: str = "unknown"

    model_config = {
        "env_file": [".env"],
        "env_prefix": "WORKHUB_",
        "extra": "ignore",
    }
