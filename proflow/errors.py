"""Error taxonomy shared by the store, auth and import layers."""

from fastapi import status


class ProFlowError(Exception):
    """Base error carrying a human-readable message and an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(ProFlowError):
    """No signed-in identity; writes are blocked."""

    status_code = status.HTTP_401_UNAUTHORIZED


class StoreError(ProFlowError):
    """Subscription or write failure in the item store."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class NotFoundError(StoreError):
    """The addressed document does not exist in the store."""

    status_code = status.HTTP_404_NOT_FOUND


class NetworkError(ProFlowError):
    """Spreadsheet fetch failed or returned a non-success status."""

    status_code = status.HTTP_502_BAD_GATEWAY


class FormatError(ProFlowError):
    """Fetched or uploaded content is not usable CSV data."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
