from enum import StrEnum


class StorageProviderName(StrEnum):
    R2 = "r2"
    S3 = "s3"
    MINIO = "minio"


class UploadPhase(StrEnum):
    INITIATE = "initiate"
    SIGN_PART = "sign_part"
    COMPLETE = "complete"


CORS_ALLOW_METHODS = "GET,POST,OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type"
