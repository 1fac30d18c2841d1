from fastapi import status


class UploadGatewayError(Exception):
    """Base for failures that are reported to the caller as-is."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ClientInputError(UploadGatewayError):
    """Request rejected before any storage call was made."""

    status_code = status.HTTP_400_BAD_REQUEST


class StorageBackendError(UploadGatewayError):
    """The storage backend refused or failed the operation.

    ``message`` is the backend's own error text, unchanged.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
