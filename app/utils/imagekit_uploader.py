import base64
import logging
from typing import List, Optional
from imagekitio import ImageKit
from imagekitio.models.UploadFileRequestOptions import UploadFileRequestOptions
from starlette.concurrency import run_in_threadpool
from app.core.config import Settings

logger = logging.getLogger(__name__)


class ImageKitUploader:
    """Uploads images to ImageKit and resolves their public URLs."""

    def __init__(self, imagekit: ImageKit):
        self.imagekit = imagekit

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["ImageKitUploader"]:
        if not (settings.IMAGEKIT_PRIVATE_KEY and settings.IMAGEKIT_URL_ENDPOINT):
            return None
        return cls(ImageKit(
            public_key=settings.IMAGEKIT_PUBLIC_KEY,
            private_key=settings.IMAGEKIT_PRIVATE_KEY,
            url_endpoint=settings.IMAGEKIT_URL_ENDPOINT
        ))

    async def upload_image(self, file: bytes, file_name: str, folder: str, tags: List[str] = None) -> dict:
        encoded = base64.b64encode(file).decode("utf-8")
        try:
            upload = await run_in_threadpool(
                self.imagekit.upload_file,
                file=encoded,
                file_name=file_name,
                options=UploadFileRequestOptions(
                    folder=f"/{folder}",
                    is_private_file=False,
                    use_unique_file_name=False,
                    tags=tags or []
                )
            )

            if not hasattr(upload, "response_metadata"):
                raise Exception("No response metadata from ImageKit")

            metadata = upload.response_metadata.raw

            if not metadata.get("url") or not metadata.get("fileId"):
                raise Exception(f"Upload failed: {metadata.get('message', 'Unknown error')}")

            return {
                "url": metadata["url"],
                "fileId": metadata["fileId"]
            }

        except Exception as e:
            logger.error(f"ImageKit upload error: {str(e)}")
            raise

    def public_url(self, folder: str, file_name: str) -> str:
        return self.imagekit.url({"path": f"/{folder}/{file_name}"})

