"""Configuration management from environment variables."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file
load_dotenv()

# Project root
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
LOCAL_DB = Path(os.getenv("LOCAL_DB", str(DATA_DIR / "vendas_completas.db")))


class Config:
    """Application configuration."""

    # Mercado Livre
    ML_API_BASE: str = os.getenv("ML_API_BASE", "https://api.mercadolibre.com")
    ML_ACCESS_TOKEN: str | None = os.getenv("ML_ACCESS_TOKEN")
    ML_SELLER_ID: str | None = os.getenv("ML_SELLER_ID")

    # Enrichment
    TIMEOUT: float = float(os.getenv("TIMEOUT", "20"))
    MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "0"))
    RATE_PER_SECOND: float = float(os.getenv("RATE_PER_SECOND", "0"))
    ORDER_CONCURRENCY: int = int(os.getenv("ORDER_CONCURRENCY", "1"))
    DEFAULT_LIMIT: int = int(os.getenv("DEFAULT_LIMIT", "50"))
    BATCH_TIMEOUT: float = float(os.getenv("BATCH_TIMEOUT", "600"))

    # Supabase
    SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
    SUPABASE_SERVICE_ROLE: str | None = os.getenv("SUPABASE_SERVICE_ROLE")
    SUPABASE_TABLE: str = os.getenv("SUPABASE_TABLE", "vendas_completas")
    ACCOUNTS_TABLE: str = os.getenv("ACCOUNTS_TABLE", "integration_accounts")
    SECRET_FUNCTION: str = os.getenv("SECRET_FUNCTION", "integrations-get-secret")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # API Security
    API_KEY: str | None = os.getenv("API_KEY")

    @classmethod
    def validate(cls, require_supabase: bool = True, require_token: bool = False) -> None:
        """Validate required configuration."""
        errors = []
        if require_supabase:
            if not cls.SUPABASE_URL:
                errors.append("SUPABASE_URL is required")
            if not cls.SUPABASE_SERVICE_ROLE:
                errors.append("SUPABASE_SERVICE_ROLE is required")
        if require_token:
            if not cls.ML_ACCESS_TOKEN:
                errors.append("ML_ACCESS_TOKEN is required without Supabase credentials")
            if not cls.ML_SELLER_ID:
                errors.append("ML_SELLER_ID is required without Supabase credentials")
        if cls.ORDER_CONCURRENCY < 1:
            errors.append("ORDER_CONCURRENCY must be >= 1")
        if cls.MAX_RETRIES < 0:
            errors.append("MAX_RETRIES must be >= 0")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")


config = Config()
