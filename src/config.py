from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Sync playback
    SYNC_DEBOUNCE_MS: int = 50
    SYNC_ARRIVAL_WINDOW_SECONDS: float = 0.2
    SYNC_MIN_PAUSE_SECONDS: float = 0.3
    SYNC_DEMO_MIN_PAUSE_SECONDS: float = 2.0
    SYNC_COUNTDOWN_TICK_SECONDS: float = 0.1
    SEEK_REARM_WINDOW_SECONDS: float = 5.0
    TIMESTAMP_KEY_SCALE: int = 10  # one decimal place
    DEMO_MODE: bool = False

    # Player
    PLAYER_PROGRESS_INTERVAL_MS: int = 200
    MEDIA_SOURCE: Optional[str] = None
    MEDIA_DURATION_SECONDS: float = 600.0

    # Persistence
    PAUSE_MAP_PATH: Optional[str] = "/data/pause_map.json"
    PERSIST_ENABLED: bool = True

    # System
    LOG_LEVEL: str = "INFO"
    HTTP_SERVER_ENABLED: bool = True
    HTTP_SERVER_PORT: int = 8080
    HTTP_SERVER_TOKEN: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

settings = Settings()
