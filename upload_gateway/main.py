from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import Counter
from starlette.exceptions import HTTPException as StarletteHTTPException

from upload_gateway.api.router import api_router
from upload_gateway.core.config import Settings, get_settings
from upload_gateway.core.constants import CORS_ALLOW_HEADERS, CORS_ALLOW_METHODS
from upload_gateway.core.errors import UploadGatewayError
from upload_gateway.core.logging import configure_logging

logger = structlog.get_logger()
REQUEST_COUNTER = Counter(
    "upload_gateway_requests_total",
    "Total API requests",
    ["method", "route", "status"],
)


def cors_headers(settings: Settings) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": settings.cors_allow_origin,
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    settings = get_settings()
    logger.info(
        "startup",
        env=settings.app_env,
        storage_provider=settings.storage_provider,
        bucket=settings.storage_bucket,
    )
    yield
    logger.info("shutdown")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        headers = cors_headers(settings)
        if request.method == "OPTIONS":
            return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)
        response = await call_next(request)
        response.headers.update(headers)
        return response

    @app.middleware("http")
    async def request_log_middleware(request: Request, call_next):
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            route = getattr(request.scope.get("route"), "path", "unmatched")
            REQUEST_COUNTER.labels(method=request.method, route=route, status=str(status_code)).inc()
            logger.info(
                "request",
                method=request.method,
                path=request.url.path,
                route=route,
                status=status_code,
            )

    @app.exception_handler(UploadGatewayError)
    async def upload_error_handler(_: Request, exc: UploadGatewayError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return PlainTextResponse("Not found", status_code=exc.status_code, headers=exc.headers)
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            return PlainTextResponse("Method not allowed", status_code=exc.status_code, headers=exc.headers)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_: Request, exc: Exception):
        # runs outside the middleware stack, so CORS headers are set here
        logger.exception("unhandled_exception", error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
            headers=cors_headers(settings),
        )

    app.include_router(api_router, prefix=settings.api_prefix)
    return app
