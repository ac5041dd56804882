"""Common schemas used across the API."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format.

    Format: { "error": CODE } where CODE is a stable string such as
    "NAME_REQUIRED" or "NOT_FOUND".
    """

    error: str


class OkResponse(BaseModel):
    """Acknowledgement for writes that return nothing else."""

    ok: bool = True


class CreatedResponse(OkResponse):
    """Acknowledgement carrying the id of the created row."""

    id: int
