from dataclasses import dataclass


@dataclass(frozen=True)
class UploadedPart:
    part_number: int
    etag: str


class MultipartStorage:
    """Object storage that speaks the multipart-upload protocol.

    Implementations hold no per-session state; the backend owns it.
    """

    def open_session(self, bucket: str, key: str) -> str:
        raise NotImplementedError

    def sign_part_url(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        part_number: int,
        ttl_seconds: int,
    ) -> str:
        raise NotImplementedError

    def complete_session(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        parts: list[UploadedPart],
    ) -> str:
        raise NotImplementedError
