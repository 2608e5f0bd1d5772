from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFound(ServiceError):
    """A student, class or schedule required as a precondition does not exist."""

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class InvalidAmount(ServiceError):
    def __init__(self, message: str = "Payment amount must be a positive whole number") -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class Conflict(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class StoreWriteFailure(ServiceError):
    """The underlying persistence call failed. Never retried."""

    def __init__(self, message: str = "Failed to write to the record store") -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
