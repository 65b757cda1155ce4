from dataclasses import dataclass
from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int


class ErrorCatalog:
    MISSING_FIELDS = ErrorDefinition(
        "MISSING_FIELDS",
        "Missing required fields",
        status.HTTP_400_BAD_REQUEST,
    )
    BACKEND_REJECTED = ErrorDefinition(
        "BACKEND_REJECTED",
        "The authentication backend rejected the request",
        status.HTTP_400_BAD_REQUEST,
    )
    INVALID_CREDENTIALS = ErrorDefinition(
        "INVALID_CREDENTIALS",
        "Invalid credentials",
        status.HTTP_401_UNAUTHORIZED,
    )
    EMAIL_ALREADY_REGISTERED = ErrorDefinition(
        "EMAIL_ALREADY_REGISTERED",
        "Email already registered",
        status.HTTP_409_CONFLICT,
    )
    BACKEND_UNAVAILABLE = ErrorDefinition(
        "BACKEND_UNAVAILABLE",
        "Backend unavailable",
        status.HTTP_503_SERVICE_UNAVAILABLE,
    )
    BACKEND_ERROR = ErrorDefinition(
        "BACKEND_ERROR",
        "The backend could not complete the request",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    INTERNAL_ERROR = ErrorDefinition(
        "INTERNAL_ERROR",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object | None = None):
        self.error = error
        self.details = details
        super().__init__(error.message)
