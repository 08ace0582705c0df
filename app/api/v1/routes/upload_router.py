from typing import Optional
from fastapi import APIRouter, Depends, File, Path, UploadFile
from app.core.dependencies import AppServices, get_services
from app.services.upload_services.upload_photo import upload_photo, get_public_url

router = APIRouter()


@router.post("/{target}")
async def upload_photo_route(
    target: str = Path(..., description="Upload target, e.g. staff-photo"),
    file: Optional[UploadFile] = File(None),
    services: AppServices = Depends(get_services)
):
    return await upload_photo(target, file, services)


@router.get("/{target}/{file_name}")
async def get_public_url_route(
    target: str = Path(..., description="Upload target the file was stored under"),
    file_name: str = Path(..., description="Stored file name"),
    services: AppServices = Depends(get_services)
):
    return await get_public_url(target, file_name, services)
