import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)


def init_db(path: Path) -> None:
    """Инициализация схемы БД (если ещё не создана)."""
    db_path = Path(path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS links (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                short_code TEXT UNIQUE NOT NULL,
                original_url TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_links_original_url ON links (original_url)"
        )
        conn.commit()
    logger.info("База данных инициализирована по пути %s", db_path)


@contextmanager
def get_connection(path: Path) -> Iterator[sqlite3.Connection]:
    """Контекстный менеджер для работы с соединением sqlite."""
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        logger.exception("Ошибка при работе с БД, выполнен rollback")
        raise
    finally:
        conn.close()
