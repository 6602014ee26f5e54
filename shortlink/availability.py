import logging
from enum import Enum

from .errors import DatastoreError
from .repository import LinkStore

logger = logging.getLogger(__name__)


class OnCheckError(str, Enum):
    """Что делать, если проверка занятости кода упала с ошибкой хранилища."""

    # Ошибка трактуется как «код свободен»: возможна попытка вставки дубликата,
    # её отсекает уникальный индекс.
    TREAT_AS_AVAILABLE = "available"
    TREAT_AS_TAKEN = "taken"
    RAISE = "raise"


class AvailabilityChecker:
    def __init__(
        self,
        store: LinkStore,
        on_error: OnCheckError = OnCheckError.TREAT_AS_AVAILABLE,
    ) -> None:
        self.store = store
        self.on_error = OnCheckError(on_error)

    def is_taken(self, code: str) -> bool:
        """True, если код уже привязан к какому-либо URL."""
        try:
            return self.store.find_by_code(code) is not None
        except DatastoreError as exc:
            if self.on_error is OnCheckError.RAISE:
                raise
            taken = self.on_error is OnCheckError.TREAT_AS_TAKEN
            logger.warning(
                "Ошибка проверки кода %s (%s), считаем %s",
                code,
                exc,
                "занятым" if taken else "свободным",
            )
            return taken
