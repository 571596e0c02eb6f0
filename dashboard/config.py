from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Probe history backend
    history_base_url: str = "http://localhost:8080"
    history_path: str = "/api/status/history"

    # HTTP client timeouts (seconds)
    http_connect_timeout: float = 5.0
    http_read_timeout: float = 30.0

    # Logging
    log_level: str = "info"

    # Presentation
    page_size: int = 10
    default_window_hours: float = 24.0
    refresh_interval: str = "off"  # "off" or a number of seconds

    # Persisted preferences (theme)
    preferences_path: str = "data/preferences.json"

    # CORS
    cors_origins: str = "http://localhost:3000"

    model_config = {"env_prefix": "DASHBOARD_", "case_sensitive": False, "env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
