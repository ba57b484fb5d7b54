from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./estimates.db"
    COMPANY_NAME: str = "Gryphon Metal Buildings"
    LOG_LEVEL: str = "INFO"

    # Snapshot row the persistence adapter reads and writes
    ESTIMATE_STORAGE_KEY: str = "gryphon-estimator-storage"

    # Pricing inputs
    DELIVERY_DISTANCE_MILES: int = 0
    RATES_FILE: Optional[str] = None  # JSON override of the default rate table

    class Config:
        env_file = ".env"


settings = Settings()
