from typing import Any

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from upload_gateway.core.config import Settings, get_settings
from upload_gateway.core.errors import StorageBackendError
from upload_gateway.integrations.storage.base import MultipartStorage, UploadedPart

logger = structlog.get_logger()


def build_s3_client(settings: Settings) -> Any:
    session = boto3.session.Session()
    return session.client(
        "s3",
        endpoint_url=settings.storage_endpoint_url,
        region_name=settings.s3_region,
        aws_access_key_id=settings.s3_access_key or None,
        aws_secret_access_key=settings.s3_secret_key or None,
        config=Config(signature_version="s3v4"),
    )


class S3MultipartStorage(MultipartStorage):
    """boto3 backend for S3-compatible services (AWS S3, Cloudflare R2, MinIO)."""

    def __init__(self, settings: Settings | None = None, client: Any = None) -> None:
        self.settings = settings or get_settings()
        self.client = client or build_s3_client(self.settings)

    def open_session(self, bucket: str, key: str) -> str:
        try:
            res = self.client.create_multipart_upload(Bucket=bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            logger.warning("s3_create_multipart_upload_failed", bucket=bucket, key=key, error=str(exc))
            raise StorageBackendError(str(exc)) from exc
        upload_id = res.get("UploadId")
        if not upload_id:
            raise StorageBackendError("backend returned no UploadId")
        return upload_id

    def sign_part_url(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        part_number: int,
        ttl_seconds: int,
    ) -> str:
        try:
            return self.client.generate_presigned_url(
                "upload_part",
                Params={
                    "Bucket": bucket,
                    "Key": key,
                    "UploadId": upload_id,
                    "PartNumber": part_number,
                },
                ExpiresIn=ttl_seconds,
                HttpMethod="PUT",
            )
        except (BotoCoreError, ClientError) as exc:
            logger.warning("s3_presign_upload_part_failed", bucket=bucket, key=key, error=str(exc))
            raise StorageBackendError(str(exc)) from exc

    def complete_session(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        parts: list[UploadedPart],
    ) -> str:
        try:
            res = self.client.complete_multipart_upload(
                Bucket=bucket,
                Key=key,
                UploadId=upload_id,
                MultipartUpload={
                    "Parts": [{"ETag": p.etag, "PartNumber": p.part_number} for p in parts],
                },
            )
        except (BotoCoreError, ClientError) as exc:
            logger.warning("s3_complete_multipart_upload_failed", bucket=bucket, key=key, error=str(exc))
            raise StorageBackendError(str(exc)) from exc
        return res.get("Location") or self.object_url(bucket, key)

    def object_url(self, bucket: str, key: str) -> str:
        public_base = self.settings.s3_public_base_url.rstrip("/")
        if public_base:
            return f"{public_base}/{key}"
        endpoint = self.settings.storage_endpoint_url
        if endpoint:
            return f"{endpoint}/{bucket}/{key}"
        return f"https://{bucket}.s3.{self.settings.s3_region}.amazonaws.com/{key}"
