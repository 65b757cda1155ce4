from clients.wms_backend_sdk.errors import BackendError, ErrorKind


class ErrorMapper:
    _KIND_MESSAGES = {
        ErrorKind.CREDENTIALS: ("INVALID_CREDENTIALS", "Email or password is incorrect.", "Check your credentials and try again."),
        ErrorKind.PERMISSION: ("PERMISSION_DENIED", "You do not have access to this data.", "Ask an administrator to review your permissions."),
        ErrorKind.NETWORK: ("NETWORK_ERROR", "The server could not be reached.", "Changes are kept locally; try again shortly."),
        ErrorKind.VALIDATION: ("VALIDATION_ERROR", "Some fields are missing or invalid.", "Review the highlighted fields."),
        ErrorKind.DUPLICATE: ("DUPLICATE", "This entry already exists.", "Use a different email or code."),
        ErrorKind.NOT_FOUND: ("NOT_FOUND", "The requested item no longer exists.", "Refresh the list and try again."),
    }

    _KNOWN_CODES = {
        "EMAIL_ALREADY_REGISTERED": ("This email is already registered.", "Use a different email address."),
        "MISSING_FIELDS": ("Required fields are missing.", "Fill in every required field."),
        "BACKEND_UNAVAILABLE": ("The server could not be reached.", "Try again shortly."),
        "BACKEND_ERROR": ("The server could not reach the backend.", "Try again shortly."),
    }

    @classmethod
    def to_payload(cls, error: Exception) -> dict:
        if isinstance(error, BackendError):
            if error.code in cls._KNOWN_CODES:
                code = error.code
                message, suggestion = cls._KNOWN_CODES[error.code]
            elif error.kind in cls._KIND_MESSAGES:
                code, message, suggestion = cls._KIND_MESSAGES[error.kind]
            else:
                code = error.code or "UNKNOWN"
                message, suggestion = "Something went wrong.", "Try again; contact support if it persists."
            return {
                "code": code,
                "kind": error.kind.value,
                "message": message,
                "details": error.details,
                "suggestion": suggestion,
            }
        return {
            "code": "INTERNAL_ERROR",
            "kind": ErrorKind.UNKNOWN.value,
            "message": "Something went wrong.",
            "details": str(error),
            "suggestion": "Try again; contact support if it persists.",
        }

    @classmethod
    def to_display_message(cls, error: Exception) -> str:
        payload = cls.to_payload(error)
        return f"[{payload['code']}] {payload['message']} {payload['suggestion']}"
