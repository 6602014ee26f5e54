import hashlib
import logging
import random
from datetime import datetime
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
RandomSource = Callable[[], float]

CODE_LENGTH = 10


def normalize_url(url: str) -> str:
    return url.strip().lower()


class CodeGenerator:
    """Генерирует кандидата в короткие коды из URL и номера попытки.

    Соль зависит от текущего времени и случайного числа, поэтому повторные
    вызовы для одной и той же пары (url, attempt) обычно дают разные коды.
    Для детерминированных тестов часы и источник случайности подменяются.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        rand: Optional[RandomSource] = None,
        length: int = CODE_LENGTH,
    ) -> None:
        self._clock = clock or datetime.now
        self._rand = rand or random.random
        self.length = length

    def salt(self) -> float:
        now = self._clock()
        # Месяц считается с нуля.
        return (now.month - 1) * now.year - now.second + self._rand()

    def generate(self, url: str, attempt: int) -> str:
        data = f"{normalize_url(url)}{self.salt()}{attempt}"
        code = hashlib.sha256(data.encode("utf-8")).hexdigest()[: self.length]
        logger.debug("Сгенерирован код %s (попытка %d)", code, attempt)
        return code
