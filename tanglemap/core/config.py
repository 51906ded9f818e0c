# tanglemap/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Scheduler
    TICK_INTERVAL_MS: int = 16

    # Layout physics
    REPULSION: float = 5000.0
    REST_LENGTH: float = 100.0
    SPRING_K: float = 0.05
    DAMPING: float = 0.85
    CENTERING: float = 0.01
    MAX_FORCE: float = 20.0
    MIN_DISTANCE: float = 1.0
    SPAWN_SPREAD: float = 200.0

    # Viewport
    CANVAS_WIDTH: int = 800
    CANVAS_HEIGHT: int = 600
    ZOOM_MIN: float = 0.2
    ZOOM_MAX: float = 5.0

    # Interaction
    HIT_RADIUS_PX: float = 14.0
    DRAG_THRESHOLD_PX: float = 4.0
    DOUBLE_CLICK_MS: int = 400
    # Intents kept for GET /map/intents; the oldest is dropped when full
    INTENT_QUEUE_SIZE: int = 64

    # Rendering
    NODE_RADIUS: float = 10.0
    LABEL_MIN_ZOOM: float = 0.6
    LABEL_MAX_CHARS: int = 32

    LIMITER_STORAGE_URI: str = "memory://"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
