from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from upload_gateway.api.deps import get_coordinator
from upload_gateway.core.errors import ClientInputError
from upload_gateway.schemas.uploads import (
    CompleteUploadRequest,
    CompleteUploadResponse,
    InitiateUploadResponse,
    SignPartResponse,
)
from upload_gateway.services.upload_service import UploadCoordinator, parse_part_number

router = APIRouter(tags=["uploads"])


@router.api_route("/initiate", methods=["GET", "POST"], response_model=InitiateUploadResponse)
async def initiate_upload(coordinator: UploadCoordinator = Depends(get_coordinator)):
    upload_id, key = await coordinator.initiate()
    return InitiateUploadResponse(upload_id=upload_id, key=key)


@router.get("/sign-part", response_model=SignPartResponse)
async def sign_part(
    request: Request,
    coordinator: UploadCoordinator = Depends(get_coordinator),
):
    params = request.query_params
    signed_url = await coordinator.authorize_part(
        key=params.get("key"),
        upload_id=params.get("uploadId"),
        part_number=parse_part_number(params.get("partNumber")),
    )
    return SignPartResponse(signed_url=signed_url)


@router.post("/complete", response_model=CompleteUploadResponse)
async def complete_upload(
    request: Request,
    coordinator: UploadCoordinator = Depends(get_coordinator),
):
    body = await request.body()
    try:
        payload = CompleteUploadRequest.model_validate_json(body)
    except ValidationError as exc:
        raise ClientInputError("Invalid request body") from exc
    location = await coordinator.complete(
        key=payload.key,
        upload_id=payload.upload_id,
        parts=payload.parts,
    )
    return CompleteUploadResponse(location=location)
