"""Сервис коротких ссылок."""

__version__ = "0.1.0"
