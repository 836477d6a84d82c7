"""Upload handler: the POST /upload route and the pipeline behind it."""

from .router import get_upload_pipeline, router
from .schemas import PRESIGNED_URL_EXPIRY_SECONDS, UploadedImage, UploadResult
from .service import UploadPipeline

__all__ = [
    "PRESIGNED_URL_EXPIRY_SECONDS",
    "UploadedImage",
    "UploadResult",
    "UploadPipeline",
    "get_upload_pipeline",
    "router",
]
