import threading

from upload_gateway.core.config import get_settings
from upload_gateway.core.constants import StorageProviderName
from upload_gateway.integrations.storage.base import MultipartStorage
from upload_gateway.integrations.storage.s3 import S3MultipartStorage

_storage: MultipartStorage | None = None
_storage_lock = threading.Lock()


def get_storage() -> MultipartStorage:
    """Return the process-wide storage handle, building it on first use."""
    global _storage
    if _storage is not None:
        return _storage
    with _storage_lock:
        if _storage is None:
            settings = get_settings()
            provider = StorageProviderName(settings.storage_provider)
            if provider is StorageProviderName.R2 and not settings.storage_endpoint_url:
                raise ValueError("r2_account_id or s3_endpoint is required for the r2 storage provider")
            _storage = S3MultipartStorage(settings)
    return _storage
