import re

from pydantic import HttpUrl, TypeAdapter, ValidationError

SHORT_CODE_RE = re.compile(r"[a-zA-Z0-9]+")

_http_url = TypeAdapter(HttpUrl)


def is_valid_url(url: str) -> bool:
    """Абсолютный URL со схемой http/https и корректным хостом."""
    try:
        _http_url.validate_python(url)
    except ValidationError:
        return False
    return True


def is_valid_short_code(code: str, min_length: int = 1) -> bool:
    return len(code) >= min_length and SHORT_CODE_RE.fullmatch(code) is not None
