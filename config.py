import os
from dataclasses import dataclass
from dotenv import load_dotenv

from fines import CURRENCY_SYMBOL, FINE_PER_DAY, GRACE_PERIOD_DAYS
from search import SUGGESTION_LIMIT

load_dotenv()

@dataclass
class Settings:
    # Storage
    data_file: str = os.getenv("LIBRARY_DATA_FILE", "library_data.db")

    # Fine schedule
    grace_period_days: int = int(os.getenv("LIBRARY_GRACE_PERIOD_DAYS", str(GRACE_PERIOD_DAYS)))
    fine_per_day: int = int(os.getenv("LIBRARY_FINE_PER_DAY", str(FINE_PER_DAY)))
    currency_symbol: str = os.getenv("LIBRARY_CURRENCY_SYMBOL", CURRENCY_SYMBOL)

    # Search
    suggestion_limit: int = int(os.getenv("LIBRARY_SUGGESTION_LIMIT", str(SUGGESTION_LIMIT)))

    # Application
    app_name: str = os.getenv("APP_NAME", "Library Ledger")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "WARNING")
    debug: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")


settings = Settings()
