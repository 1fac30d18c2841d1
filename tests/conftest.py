import pytest
from fastapi.testclient import TestClient

from upload_gateway.core.config import Settings, get_settings
from upload_gateway.core.errors import StorageBackendError
from upload_gateway.integrations.storage.base import MultipartStorage, UploadedPart
from upload_gateway.integrations.storage.factory import get_storage
from upload_gateway.main import create_app


class RecordingStorage(MultipartStorage):
    """In-test backend that records every call and can be told to fail."""

    def __init__(self, upload_id: str = "U1", fail_with: str | None = None):
        self.upload_id = upload_id
        self.fail_with = fail_with
        self.calls: list[tuple] = []
        self._signed = 0

    def _maybe_fail(self) -> None:
        if self.fail_with:
            raise StorageBackendError(self.fail_with)

    def open_session(self, bucket: str, key: str) -> str:
        self.calls.append(("open_session", bucket, key))
        self._maybe_fail()
        return self.upload_id

    def sign_part_url(self, bucket, key, upload_id, part_number, ttl_seconds) -> str:
        self.calls.append(("sign_part_url", bucket, key, upload_id, part_number, ttl_seconds))
        self._maybe_fail()
        self._signed += 1
        return (
            f"https://storage.example.com/{bucket}/{key}"
            f"?uploadId={upload_id}&partNumber={part_number}&sig={self._signed}"
        )

    def complete_session(self, bucket, key, upload_id, parts: list[UploadedPart]) -> str:
        self.calls.append(("complete_session", bucket, key, upload_id, list(parts)))
        self._maybe_fail()
        return f"https://storage.example.com/{bucket}/{key}"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        storage_provider="s3",
        storage_bucket="videos",
        storage_key_prefix="uploads",
        storage_key_extension=".mp4",
        storage_part_url_ttl_seconds=3600,
        log_json=False,
    )


@pytest.fixture()
def storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture()
def client(settings: Settings, storage: RecordingStorage):
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def make_storage():
    return RecordingStorage
