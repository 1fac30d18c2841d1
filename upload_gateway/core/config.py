from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: Literal["dev", "staging", "prod"] = "dev"
    app_name: str = "Upload Gateway"
    api_prefix: str = ""
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = True
    cors_allow_origin: str = "*"

    storage_provider: Literal["r2", "s3", "minio"] = "r2"
    storage_bucket: str = Field(default="videos", min_length=1)
    storage_key_prefix: str = "uploads"
    storage_key_extension: str = ".mp4"
    storage_part_url_ttl_seconds: int = Field(default=3600, gt=0)

    r2_account_id: str = ""
    s3_endpoint: str = ""
    s3_region: str = "auto"
    s3_access_key: str = ""
    s3_secret_key: str = ""
    s3_public_base_url: str = ""

    @property
    def storage_endpoint_url(self) -> str | None:
        if self.s3_endpoint:
            return self.s3_endpoint.rstrip("/")
        if self.storage_provider == "r2" and self.r2_account_id:
            return f"https://{self.r2_account_id}.r2.cloudflarestorage.com"
        return None


@lru_cache
def get_settings() -> Settings:
    return Settings()
