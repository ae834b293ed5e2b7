import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent
ENV_PATH = BASE_DIR.parent / ".env"
load_dotenv(ENV_PATH)


@dataclass(frozen=True)
class Settings:
    database_url: str = f"sqlite:///{BASE_DIR.parent / 'omnitask.sqlite'}"
    log_level: str = "INFO"
    echo_sql: bool = False


def _flag(raw: str | None) -> bool:
    return (raw or "").strip().lower() in {"1", "true", "yes", "on"}


def get_settings() -> Settings:
    db_url = os.getenv("DATABASE_URL") or Settings.database_url
    log_level = (os.getenv("OMNITASK_LOG_LEVEL") or Settings.log_level).upper()
    return Settings(database_url=db_url, log_level=log_level, echo_sql=_flag(os.getenv("OMNITASK_ECHO_SQL")))
