"""Response envelopes shared by the write endpoints and the error handlers."""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every 404 / 502 raised by the data-fetch layer."""

    success: bool = False
    error_code: str  # "not_found" | "data_source_error"
    message: str
    details: dict[str, Any] | None = None


class DeletedResponse(BaseModel):
    success: bool = True
    table: str
    id: str
