from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class InitiateUploadResponse(_WireModel):
    upload_id: str = Field(alias="uploadId")
    key: str


class SignPartResponse(_WireModel):
    signed_url: str = Field(alias="signedUrl")


class CompletedPart(_WireModel):
    etag: str = ""
    part_number: int = Field(default=0, alias="partNumber")


class CompleteUploadRequest(_WireModel):
    key: str = ""
    upload_id: str = Field(default="", alias="uploadId")
    parts: list[CompletedPart] = Field(default_factory=list)


class CompleteUploadResponse(_WireModel):
    location: str
