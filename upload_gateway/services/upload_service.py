import math
from typing import NoReturn
from uuid import uuid4

import structlog
from prometheus_client import Counter
from starlette.concurrency import run_in_threadpool

from upload_gateway.core.config import Settings, get_settings
from upload_gateway.core.constants import UploadPhase
from upload_gateway.core.errors import ClientInputError, UploadGatewayError
from upload_gateway.integrations.storage.base import MultipartStorage, UploadedPart
from upload_gateway.schemas.uploads import CompletedPart

logger = structlog.get_logger()

PHASE_COUNTER = Counter(
    "upload_gateway_phase_total",
    "Multipart upload phase outcomes",
    ["phase", "outcome"],
)


def generate_object_key(prefix: str, extension: str) -> str:
    prefix = prefix.strip("/")
    extension = extension if not extension or extension.startswith(".") else f".{extension}"
    name = f"{uuid4().hex}{extension}"
    return f"{prefix}/{name}" if prefix else name


def parse_part_number(raw: str | int | float | None) -> int:
    """Parse a client supplied part number, returning 0 for anything unusable."""
    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if not text.isascii() or "_" in text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    # "3.0" style input; only exact, float-representable integers survive
    try:
        value = float(text)
    except ValueError:
        return 0
    if not math.isfinite(value) or not value.is_integer() or abs(value) > 2**53:
        return 0
    return int(value)


class UploadCoordinator:
    """Initiate / authorize-part / complete against a multipart storage backend.

    Every call is derived from its own arguments plus configuration, so any
    instance can serve any phase of any session.
    """

    def __init__(self, storage: MultipartStorage, settings: Settings | None = None):
        self.storage = storage
        self.settings = settings or get_settings()
        self.bucket = self.settings.storage_bucket

    async def initiate(self) -> tuple[str, str]:
        key = generate_object_key(self.settings.storage_key_prefix, self.settings.storage_key_extension)
        upload_id = await self._call(
            UploadPhase.INITIATE, key, self.storage.open_session, self.bucket, key
        )
        logger.info("upload_initiated", bucket=self.bucket, key=key, upload_id=upload_id)
        return upload_id, key

    async def authorize_part(self, key: str | None, upload_id: str | None, part_number: int) -> str:
        if not key or not upload_id or part_number <= 0:
            self._reject(UploadPhase.SIGN_PART, "Missing parameters")
        url = await self._call(
            UploadPhase.SIGN_PART,
            key,
            self.storage.sign_part_url,
            self.bucket,
            key,
            upload_id,
            part_number,
            self.settings.storage_part_url_ttl_seconds,
        )
        logger.info("part_url_signed", key=key, upload_id=upload_id, part_number=part_number)
        return url

    async def complete(self, key: str | None, upload_id: str | None, parts: list[CompletedPart]) -> str:
        if not key or not upload_id or not parts:
            self._reject(UploadPhase.COMPLETE, "Invalid request body")
        numbers = [p.part_number for p in parts]
        if any(n <= 0 for n in numbers) or any(not p.etag for p in parts):
            self._reject(UploadPhase.COMPLETE, "Invalid request body")
        if len(set(numbers)) != len(numbers):
            self._reject(UploadPhase.COMPLETE, "Duplicate part numbers")

        ordered = [
            UploadedPart(part_number=p.part_number, etag=p.etag)
            for p in sorted(parts, key=lambda p: p.part_number)
        ]
        location = await self._call(
            UploadPhase.COMPLETE,
            key,
            self.storage.complete_session,
            self.bucket,
            key,
            upload_id,
            ordered,
        )
        logger.info("upload_completed", key=key, upload_id=upload_id, parts=len(ordered), location=location)
        return location

    def _reject(self, phase: UploadPhase, message: str) -> NoReturn:
        PHASE_COUNTER.labels(phase=phase.value, outcome="rejected").inc()
        logger.info("upload_request_rejected", phase=phase.value, reason=message)
        raise ClientInputError(message)

    async def _call(self, phase: UploadPhase, key: str, fn, *args):
        # single shot; the caller retries the whole operation
        try:
            result = await run_in_threadpool(fn, *args)
        except UploadGatewayError as exc:
            PHASE_COUNTER.labels(phase=phase.value, outcome="failed").inc()
            logger.warning(f"{phase.value}_failed", key=key, error=exc.message)
            raise
        PHASE_COUNTER.labels(phase=phase.value, outcome="ok").inc()
        return result
