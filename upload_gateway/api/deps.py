from fastapi import Depends

from upload_gateway.core.config import Settings, get_settings
from upload_gateway.integrations.storage.base import MultipartStorage
from upload_gateway.integrations.storage.factory import get_storage
from upload_gateway.services.upload_service import UploadCoordinator


def get_coordinator(
    storage: MultipartStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> UploadCoordinator:
    return UploadCoordinator(storage, settings)
