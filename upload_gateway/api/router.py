from fastapi import APIRouter

from upload_gateway.api.endpoints import health, uploads

api_router = APIRouter()
api_router.include_router(uploads.router)
api_router.include_router(health.router)
