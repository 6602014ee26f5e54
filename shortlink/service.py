import logging
from dataclasses import dataclass
from typing import Optional

from .availability import AvailabilityChecker
from .codegen import CodeGenerator
from .errors import (
    AliasTakenError,
    CodeGenerationExhaustedError,
    DatastoreError,
    InternalError,
    InvalidAliasError,
    InvalidURLError,
)
from .repository import LinkRecord, LinkStore
from .validators import is_valid_short_code, is_valid_url

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5


@dataclass(frozen=True)
class ShortenResult:
    short_code: str
    reused: bool = False


class ShortenService:
    """Создание коротких ссылок и поиск оригинального URL по коду.

    Порядок проверок при сокращении:

    1. валидация URL;
    2. если URL уже сокращали, возвращается первый выданный для него код,
       даже когда запрошен пользовательский код;
    3. пользовательский код: повторный запрос той же пары идемпотентен,
       код другого URL даёт AliasTakenError, иначе одна попытка вставки;
    4. генерация: не более MAX_ATTEMPTS кандидатов, каждая коллизия
       переводит к следующей попытке, после последней
       CodeGenerationExhaustedError.

    Ошибка вставки не повторяется и превращается в InternalError.
    """

    def __init__(
        self,
        store: LinkStore,
        generator: Optional[CodeGenerator] = None,
        checker: Optional[AvailabilityChecker] = None,
        max_attempts: int = MAX_ATTEMPTS,
    ) -> None:
        self.store = store
        self.generator = generator or CodeGenerator()
        self.checker = checker or AvailabilityChecker(store)
        self.max_attempts = max_attempts

    def shorten(self, url: str, custom: Optional[str] = None) -> ShortenResult:
        url = url.strip()
        if not is_valid_url(url):
            raise InvalidURLError(url)

        existing = self.store.find_by_url(url)
        if existing is not None:
            logger.info("URL %s уже сокращён кодом %s", url, existing.short_code)
            return ShortenResult(existing.short_code, reused=True)

        custom = (custom or "").strip()
        if custom:
            return self._shorten_custom(url, custom)
        return self._shorten_generated(url)

    def resolve(self, code: str) -> Optional[str]:
        """Возвращает оригинальный URL по коду или None."""
        record = self.store.find_by_code(code)
        if record is None:
            logger.info("Оригинальный URL для кода %s не найден", code)
            return None
        return record.original_url

    def _shorten_custom(self, url: str, alias: str) -> ShortenResult:
        if not is_valid_short_code(alias):
            raise InvalidAliasError(alias)
        if self.store.find_by_code_and_url(alias, url) is not None:
            return ShortenResult(alias, reused=True)
        if self.store.find_by_code(alias) is not None:
            logger.warning("Код %s уже привязан к другому URL", alias)
            raise AliasTakenError(alias)
        self._insert(alias, url)
        return ShortenResult(alias)

    def _shorten_generated(self, url: str) -> ShortenResult:
        attempt = 0
        while attempt < self.max_attempts:
            code = self._try_attempt(url, attempt)
            if code is not None:
                return ShortenResult(code)
            attempt += 1
        logger.error("Исчерпаны попытки генерации кода для %s", url)
        raise CodeGenerationExhaustedError(self.max_attempts)

    def _try_attempt(self, url: str, attempt: int) -> Optional[str]:
        """Одна попытка: код при успехе, None при коллизии."""
        candidate = self.generator.generate(url, attempt)
        if self.checker.is_taken(candidate):
            logger.warning("Коллизия кода %s (попытка %d)", candidate, attempt)
            return None
        self._insert(candidate, url)
        return candidate

    def _insert(self, code: str, url: str) -> None:
        try:
            self.store.insert(LinkRecord(short_code=code, original_url=url))
        except DatastoreError as exc:
            # Сюда же попадает конфликт уникальности при гонке двух запросов.
            raise InternalError(f"Не удалось сохранить код {code}") from exc
