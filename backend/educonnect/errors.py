from typing import Optional


class EduConnectError(Exception):
    """Base class for errors raised by the service layer.

    Routers never catch these: handlers registered in main.py turn them
    into HTTP responses scoped to the request that triggered them.
    """

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(EduConnectError):
    """Sign-in, sign-up or OTP failure reported by Firebase Auth."""

    status_code = 401

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.code = code
        if status_code is not None:
            self.status_code = status_code


class PermissionDeniedError(EduConnectError):
    """A Firestore request was denied by security rules."""

    status_code = 403

    def __init__(self, operation: str, path: str):
        super().__init__(
            f"Missing or insufficient permissions: {operation} on '{path}' was denied"
        )
        self.operation = operation
        self.path = path


class NotFoundError(EduConnectError):
    status_code = 404


class AIResponseError(EduConnectError):
    """The model returned nothing usable for a flow's output schema."""

    status_code = 502

    def __init__(self, message: str = "The AI returned an empty or invalid response. Please try again."):
        super().__init__(message)


class PaymentInProgressError(EduConnectError):
    status_code = 409

    MESSAGES = {
        "processing": "A payment for this record is already being processed",
        "success": "This record was just paid",
    }

    def __init__(self, state: str):
        super().__init__(self.MESSAGES.get(state, f"A payment for this record cannot start while it is {state}"))
        self.state = state
