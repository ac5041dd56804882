"""Domain errors.

Every failure a client can cause is raised as a ForumError carrying a stable
string code and the HTTP status the API answers with. Routes never build
error bodies themselves; main.py maps ForumError to {"error": code}.
"""


class ForumError(Exception):
    """Base class for client-visible forum errors."""

    status_code: int = 400

    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code


class ValidationFailed(ForumError):
    """Request data is missing or malformed (400)."""

    status_code = 400


class NotFound(ForumError):
    """Target resource is absent or soft-deleted (404)."""

    status_code = 404

    def __init__(self, code: str = "NOT_FOUND") -> None:
        super().__init__(code)


class Conflict(ForumError):
    """Uniqueness conflict (409)."""

    status_code = 409
