from typing import Optional

from pydantic import BaseModel, Field, StrictStr


class ShortenRequest(BaseModel):
    url: StrictStr
    custom: Optional[StrictStr] = None


class ShortenResponse(BaseModel):
    short_url: str = Field(serialization_alias="shortURL")
    note: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
