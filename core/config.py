from pydantic.v1 import BaseSettings


class Settings(BaseSettings):

    DATABASE_URL: str = "sqlite+aiosqlite:///./duels.db"
    JWT_SECRET: str = "change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440
    CORS_ORIGINS: str = "*"
    DEBUG: bool = False

    # Поле дуэли
    CANVAS_WIDTH: float = 800
    CANVAS_HEIGHT: float = 600
    GUESS_AREA_RADIUS: float = 50
    SCALAR_MOVE_MIN: int = 0
    SCALAR_MOVE_MAX: int = 1000
    DEFAULT_DUEL_MODE: str = "canvas"

    # Рейтинг
    ELO_K_FACTOR: int = 32
    DEFAULT_RATING: int = 1000

    # Истечение зависших дуэлей
    PENDING_DUEL_TTL_MINUTES: int = 1440
    ACCEPTED_DUEL_TTL_MINUTES: int = 60
    EXPIRY_SWEEP_INTERVAL_SECONDS: int = 60

    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Создаём глобальный объект, который будем импортировать везде
settings = Settings()
