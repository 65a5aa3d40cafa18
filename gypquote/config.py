from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./gypquote.db"
    COMPANY_NAME: str = "ASSAQF Technical Services LLC"
    LOG_LEVEL: str = "INFO"

    # Country used when a stored record or quotation does not carry one
    DEFAULT_RECORD_COUNTRY: str = "India"
    DEFAULT_QUOTATION_COUNTRY: str = "UAE"

    # JSON file replacing the built-in materials / thickness / additionals table
    CATALOG_PATH: Optional[str] = None

    class Config:
        env_file = ".env"


settings = Settings()
