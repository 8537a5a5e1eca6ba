"""
errors.py — Error taxonomy shared by the API layer and the client.
"""


class TaskflowError(Exception):
    """Base class for errors surfaced to callers."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(TaskflowError):
    """Malformed input; carries per-field messages."""

    def __init__(self, message: str = "Validation failed", errors: list[dict] | None = None):
        super().__init__(message, status_code=400)
        self.errors = errors or []


class NotFoundError(TaskflowError):
    """The id does not exist or is not owned by the caller."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, status_code=404)


class TransientError(TaskflowError):
    """Network or server failure. No retry is attempted; the next action is the retry."""


def validation_errors(raw_errors) -> list[dict]:
    """Flatten pydantic/FastAPI error dicts into [{field, message}]."""
    out = []
    for err in raw_errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        out.append({"field": ".".join(loc) or None, "message": err.get("msg", "Invalid value")})
    return out
