import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response
from pydantic import ValidationError
import uvicorn

from .availability import AvailabilityChecker
from .config import Settings, load_settings
from .db import init_db
from .errors import (
    AliasTakenError,
    CodeGenerationExhaustedError,
    DatastoreError,
    InvalidAliasError,
    InvalidURLError,
)
from .repository import SQLiteLinkStore
from .schemas import ErrorResponse, ShortenRequest, ShortenResponse
from .service import ShortenService
from .validators import is_valid_short_code


logging.basicConfig(
    level=load_settings().log_level,
    format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

REUSE_NOTE = "URL was already shortened"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("Инициализация приложения")
    init_db(load_settings().db_path)
    yield
    logger.info("Остановка приложения")


app = FastAPI(title="Shortlink URL Shortener", lifespan=lifespan)


def get_settings() -> Settings:
    return load_settings()


def get_service(settings: Settings = Depends(get_settings)) -> ShortenService:
    """Собирает сервис с хранилищем на каждый запрос."""
    store = SQLiteLinkStore(settings.db_path)
    checker = AvailabilityChecker(store, settings.on_check_error)
    return ShortenService(store, checker=checker)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=CORS_HEADERS,
    )


def _build_short_url(base_url: Optional[str], code: str) -> str:
    if base_url:
        return f"{base_url.rstrip('/')}/{code}"
    # Для локальной разработки возвращаем просто относительный путь
    return f"/{code}"


def _parse_request(raw: bytes) -> ShortenRequest | JSONResponse:
    try:
        payload = json.loads(raw)
    except ValueError:
        return _error(400, "Invalid JSON")
    if not isinstance(payload, dict):
        return _error(400, "URL is required")
    try:
        body = ShortenRequest.model_validate(payload)
    except ValidationError as exc:
        fields = {err["loc"][0] for err in exc.errors() if err["loc"]}
        if "url" in fields:
            return _error(400, "URL is required")
        if "custom" in fields:
            return _error(400, "Invalid custom alias")
        return _error(400, "Invalid request body")
    if not body.url.strip():
        return _error(400, "URL is required")
    return body


@app.options("/shorten")
async def shorten_preflight() -> Response:
    return Response(status_code=200, content="", headers=CORS_HEADERS)


@app.post("/shorten")
async def shorten_url(
    request: Request,
    service: ShortenService = Depends(get_service),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    parsed = _parse_request(await request.body())
    if isinstance(parsed, JSONResponse):
        return parsed

    try:
        result = service.shorten(parsed.url, parsed.custom)
    except InvalidURLError:
        return _error(400, "Need proper URL")
    except InvalidAliasError:
        return _error(400, "Invalid custom alias")
    except AliasTakenError:
        return _error(409, "Alias already taken")
    except CodeGenerationExhaustedError:
        return _error(500, "failed to generate unique code")
    except Exception:
        logger.exception("Ошибка при сокращении %s", parsed.url)
        return _error(500, "Internal Server Error")

    short_url = _build_short_url(settings.base_url, result.short_code)
    response = ShortenResponse(
        short_url=short_url,
        note=REUSE_NOTE if result.reused else None,
    )
    logger.info("Отправлен короткий URL %s для %s", short_url, parsed.url)
    return JSONResponse(
        content=response.model_dump(by_alias=True, exclude_none=True),
        headers=CORS_HEADERS,
    )


@app.api_route(
    "/shorten",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def shorten_method_not_allowed() -> JSONResponse:
    return _error(405, "Method not allowed")


@app.get("/{code}")
async def redirect(
    code: str,
    service: ShortenService = Depends(get_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    if not is_valid_short_code(code, settings.redirect_min_code_length):
        return PlainTextResponse("invalid code", status_code=400)
    try:
        original_url = service.resolve(code)
    except DatastoreError:
        logger.exception("Ошибка поиска кода %s", code)
        return PlainTextResponse("Internal Server Error", status_code=500)
    if not original_url:
        logger.warning("Код %s не найден", code)
        return PlainTextResponse("Not found", status_code=404)
    logger.info("Редирект с %s на %s", code, original_url)
    return RedirectResponse(url=original_url, status_code=301)


@app.api_route(
    "/{code}",
    methods=["HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def redirect_method_not_allowed(code: str) -> JSONResponse:
    return _error(405, "Method not allowed")


def run() -> None:
    """Точка входа для запуска через `python -m` или console_script."""
    settings = load_settings()
    uvicorn.run(
        "shortlink.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )


if __name__ == "__main__":
    run()
