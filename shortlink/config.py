import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .availability import OnCheckError


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class Settings:
    """Настройки сервиса, читаются из переменных окружения."""

    db_path: Path
    base_url: Optional[str]
    log_level: str
    host: str
    port: int
    reload: bool
    redirect_min_code_length: int
    on_check_error: OnCheckError


def load_settings() -> Settings:
    return Settings(
        db_path=Path(os.getenv("SHORTENER_DB_PATH", "shortener.db")),
        base_url=os.getenv("BASE_URL") or None,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=_env_bool("RELOAD", "true"),
        redirect_min_code_length=int(os.getenv("REDIRECT_MIN_CODE_LENGTH", "1")),
        # Неизвестная политика: ValueError при загрузке настроек.
        on_check_error=OnCheckError(os.getenv("SHORTENER_ON_CHECK_ERROR", "available")),
    )
