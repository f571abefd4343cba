from typing import Any, Optional


class DomainError(Exception):
    """
    Base class for every error the API reports to a caller.

    `error` is the short, stable tag; `message` and `details` are optional
    human-readable context. Rendered as {"error", "message"?, "details"?}.
    """

    status_code = 500

    def __init__(
        self,
        error: str,
        message: Optional[str] = None,
        details: Optional[list[str]] = None,
    ):
        super().__init__(message or error)
        self.error = error
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.message is not None:
            body["message"] = self.message
        if self.details is not None:
            body["details"] = self.details
        return body


class Unauthenticated(DomainError):
    status_code = 401


class Forbidden(DomainError):
    status_code = 403


class NotFound(DomainError):
    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.error}


class ValidationFailed(DomainError):
    status_code = 400


class Conflict(DomainError):
    status_code = 409


class InvalidReference(DomainError):
    status_code = 400
