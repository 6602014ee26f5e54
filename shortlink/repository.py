import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from .db import get_connection
from .errors import DatastoreError, LinkConflictError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkRecord:
    short_code: str
    original_url: str
    id: Optional[int] = None
    created_at: Optional[str] = None


class LinkStore(Protocol):
    """Хранилище ссылок.

    Методы поиска возвращают None, если строки нет, и бросают DatastoreError,
    если сам запрос не удался. insert бросает LinkConflictError при нарушении
    уникальности short_code.
    """

    def find_by_code(self, code: str) -> Optional[LinkRecord]: ...

    def find_by_url(self, url: str) -> Optional[LinkRecord]: ...

    def find_by_code_and_url(self, code: str, url: str) -> Optional[LinkRecord]: ...

    def insert(self, record: LinkRecord) -> LinkRecord: ...


_SELECT = "SELECT id, short_code, original_url, created_at FROM links"


def _to_record(row: Optional[sqlite3.Row]) -> Optional[LinkRecord]:
    if row is None:
        return None
    return LinkRecord(
        short_code=row["short_code"],
        original_url=row["original_url"],
        id=row["id"],
        created_at=row["created_at"],
    )


class SQLiteLinkStore:
    """LinkStore поверх sqlite, одно соединение на операцию."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _fetch_one(self, query: str, params: tuple) -> Optional[LinkRecord]:
        try:
            with get_connection(self.path) as conn:
                row = conn.execute(query, params).fetchone()
        except sqlite3.Error as exc:
            raise DatastoreError(str(exc)) from exc
        return _to_record(row)

    def find_by_code(self, code: str) -> Optional[LinkRecord]:
        return self._fetch_one(f"{_SELECT} WHERE short_code = ?", (code,))

    def find_by_url(self, url: str) -> Optional[LinkRecord]:
        # Каноничной считается самая первая запись для URL.
        return self._fetch_one(
            f"{_SELECT} WHERE original_url = ? ORDER BY id LIMIT 1", (url,)
        )

    def find_by_code_and_url(self, code: str, url: str) -> Optional[LinkRecord]:
        return self._fetch_one(
            f"{_SELECT} WHERE short_code = ? AND original_url = ?", (code, url)
        )

    def insert(self, record: LinkRecord) -> LinkRecord:
        """Создаёт запись в БД и возвращает её с id."""
        try:
            with get_connection(self.path) as conn:
                cur = conn.execute(
                    "INSERT INTO links (short_code, original_url) VALUES (?, ?)",
                    (record.short_code, record.original_url),
                )
                row_id = cur.lastrowid
        except sqlite3.IntegrityError as exc:
            logger.warning("Код %s уже существует: %s", record.short_code, exc)
            raise LinkConflictError(str(exc)) from exc
        except sqlite3.Error as exc:
            raise DatastoreError(str(exc)) from exc
        logger.info("Создана короткая ссылка: %s -> %s", record.short_code, record.original_url)
        return LinkRecord(
            short_code=record.short_code,
            original_url=record.original_url,
            id=row_id,
        )
