"""Pydantic models for the upload pipeline.

- UploadedImage: the file part of a POST /upload request
- UploadResult: what a successful pipeline run produced
"""
from typing import Optional

from pydantic import BaseModel, Field

# Lifetime of the presigned read URL stored with each upload.
PRESIGNED_URL_EXPIRY_SECONDS = 3600

SUCCESS_MESSAGE = "Image and metadata uploaded successfully"
ERROR_MESSAGE = "Error uploading image"


class UploadedImage(BaseModel):
    """Raw image payload as received from the client."""
    filename: str = Field(..., description="Original filename, used verbatim as the storage key")
    content_type: str = Field(..., description="MIME type sent by the client")
    content: bytes = Field(..., description="File bytes")


class UploadResult(BaseModel):
    """Outcome of a completed upload."""
    key: str = Field(..., description="Object key the image was stored under")
    image_url: str = Field(..., description="Presigned read URL recorded in the metadata row")
    description: Optional[str] = Field(None, description="Caller-supplied description")
