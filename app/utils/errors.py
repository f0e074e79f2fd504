"""HTTP errors shared by the routers.

Each class pins a status code so handlers can raise by meaning and let
``handle_exception`` render the shared response envelope.
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None, headers: dict | None = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail, headers=headers)


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class InvalidInputError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input"


class UnauthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Token is not valid."


class UnauthorizedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied. Insufficient permissions."


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists"


class ExpiredError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid or expired OTP"


class DependencyFailureError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Upstream service failed"
