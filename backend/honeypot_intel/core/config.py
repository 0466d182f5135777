from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "honeypot-intel-backend"
    ENVIRONMENT: str = "local"

    # Sensor exports (one NDJSON file per sensor export)
    DATA_DIR: str = "data/honeypots"
    DATA_GLOB: str = "*.ndjson"

    # Event store
    CACHE_TTL_SECONDS: float = 10.0

    # Synthetic dataset used when nothing could be loaded (disable in prod)
    PLACEHOLDER_ENABLED: bool = True
    PLACEHOLDER_EVENT_COUNT: int = 250

    # Adapters
    DEFAULT_ADAPTER: str = "local"
    REMOTE_API_BASE_URL: str = "http://localhost:8000/api/v1"
    REMOTE_TIMEOUT_SECONDS: float = 15.0

    # Threat intel / sensor health thresholds
    MALICIOUS_ABUSE_SCORE: int = 70
    SENSOR_ONLINE_WINDOW_SECONDS: int = 300

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
