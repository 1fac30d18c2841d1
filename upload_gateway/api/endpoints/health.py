import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.concurrency import run_in_threadpool

from upload_gateway.integrations.storage import factory

router = APIRouter(tags=["health"])
logger = structlog.get_logger()


@router.get("/health/live")
async def health_live():
    return {"status": "ok"}


@router.get("/health/ready")
async def health_ready():
    """Ready once the storage handle can be built from the current settings."""
    try:
        await run_in_threadpool(factory.get_storage)
    except Exception as exc:
        logger.warning("storage_not_ready", error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "error": str(exc)},
        )
    return {"status": "ready"}


@router.get("/metrics", response_class=PlainTextResponse)
async def metrics():
    return PlainTextResponse(generate_latest().decode("utf-8"), media_type=CONTENT_TYPE_LATEST)
