from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./quotes.db"
    COMPANY_NAME: str = "QuoteDesk Construction"
    LOG_LEVEL: str = "INFO"

    # Quote numbering: QD-2026-0001
    QUOTE_NUMBER_PREFIX: str = "QD"
    QUOTE_VALID_DAYS: int = 30

    # Seed values for the shop settings row, created on first read.
    # After that the row (GET/PUT /api/settings) is what new quotes use.
    DEFAULT_COMPLEXITY_PCT: float = 0.0
    DEFAULT_MARKUP_PCT: float = 10.0
    DEFAULT_TAX_PCT: float = 0.0
    DEFAULT_TASK_PRICE: float = 0.0
    DEFAULT_MATERIAL_PRICE: float = 0.0
    DEFAULT_CURRENCY: str = "USD"
    DEFAULT_CURRENCY_SYMBOL: str = "$"

    class Config:
        env_file = ".env"


settings = Settings()
