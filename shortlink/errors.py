class ShortenerError(Exception):
    """Базовое исключение сервиса коротких ссылок."""


class InvalidInputError(ShortenerError):
    """Некорректные входные данные запроса."""


class InvalidURLError(InvalidInputError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Некорректный URL: {url!r}")
        self.url = url


class InvalidAliasError(InvalidInputError):
    def __init__(self, alias: str) -> None:
        super().__init__(f"Некорректный пользовательский код: {alias!r}")
        self.alias = alias


class AliasTakenError(ShortenerError):
    """Пользовательский код уже привязан к другому URL."""

    def __init__(self, alias: str) -> None:
        super().__init__(f"Код {alias!r} уже занят")
        self.alias = alias


class CodeGenerationExhaustedError(ShortenerError):
    """Все попытки сгенерировать свободный код закончились коллизией."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Не удалось сгенерировать уникальный код за {attempts} попыток")
        self.attempts = attempts


class InternalError(ShortenerError):
    """Сбой при записи в хранилище или непредвиденная ошибка."""


class DatastoreError(ShortenerError):
    """Запрос к хранилищу завершился ошибкой (не «нет строки»)."""


class LinkConflictError(DatastoreError):
    """Нарушение уникальности short_code при вставке."""
