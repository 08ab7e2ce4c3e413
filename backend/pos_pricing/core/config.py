from pydantic_settings import BaseSettings
from typing import List
from decimal import Decimal
from zoneinfo import ZoneInfo


class Settings(BaseSettings):
    ENV: str = "development"
    DATABASE_URL: str = "sqlite:///./pos_pricing.db"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Все акции считаются по одним часам (время ресторана)
    TIMEZONE: str = "Asia/Ho_Chi_Minh"

    # Допустимое расхождение суммы клиента и сервера
    PRICE_TOLERANCE: Decimal = Decimal("0.01")

    # Попытки генерации уникального кода акции
    PROMO_CODE_MAX_ATTEMPTS: int = 5

    LOG_LEVEL: str = "INFO"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)

    class Config:
        env_file = ".env"


settings = Settings()
