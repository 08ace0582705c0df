import logging
from typing import Optional
from fastapi import UploadFile
from fastapi.responses import JSONResponse
from app.core.dependencies import AppServices
from app.core.exceptions import ServerError, ValidationError
from app.utils.file_utils import generate_file_name, image_extension

logger = logging.getLogger(__name__)

# target -> (file name prefix, storage folder)
UPLOAD_TARGETS = {
    "staff-photo": ("staff", "staff-photos"),
    "student-photo": ("student", "student-photos"),
    "settings-photo": ("business", "settings-photos/photos"),
}


async def upload_photo(target: str, file: Optional[UploadFile], services: AppServices):
    if target not in UPLOAD_TARGETS:
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": f"Unknown upload target: {target}"}
        )

    if file is None:
        raise ValidationError("No file uploaded")

    ext = image_extension(file.filename, file.content_type)

    contents = await file.read()
    if not contents:
        raise ValidationError("No file uploaded")

    if services.uploader is None:
        raise ServerError("Storage service not configured")

    prefix, folder = UPLOAD_TARGETS[target]
    file_name = generate_file_name(prefix, ext)

    try:
        uploaded = await services.uploader.upload_image(
            file=contents,
            file_name=file_name,
            folder=folder,
            tags=[prefix],
        )
    except Exception as e:
        raise ServerError("Failed to upload to storage") from e

    logger.info(f"Uploaded {file_name} to /{folder}")
    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "message": "File uploaded successfully",
            "url": uploaded["url"],
            "fileId": uploaded["fileId"],
            "fileName": file_name,
            "mimeType": file.content_type,
            "size": len(contents)
        }
    )


async def get_public_url(target: str, file_name: str, services: AppServices):
    if target not in UPLOAD_TARGETS:
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": f"Unknown upload target: {target}"}
        )

    if services.uploader is None:
        raise ServerError("Storage service not configured")

    _, folder = UPLOAD_TARGETS[target]
    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "url": services.uploader.public_url(folder, file_name),
            "fileName": file_name
        }
    )
