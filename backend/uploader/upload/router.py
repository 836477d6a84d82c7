"""FastAPI router for POST /upload.

The browser form posts a multipart body with an ``image`` file and a
``description`` text field. The response is plain text either way:

- 200 ``Image and metadata uploaded successfully``
- 500 ``Error uploading image``

Which step failed is only visible in the server log.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse

from ..exceptions import UploadError, UploadRequestError
from .schemas import ERROR_MESSAGE, SUCCESS_MESSAGE, UploadedImage
from .service import UploadPipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])


def get_upload_pipeline(request: Request) -> UploadPipeline:
    """Return the pipeline built by the application lifespan."""
    return request.app.state.pipeline


@router.post("/upload", response_class=PlainTextResponse)
async def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(None),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    """Store an uploaded image and record its metadata.

    ``description`` is read from the raw form and stored exactly as sent,
    empty string included; it is NULL only when the field is absent.

    Args:
        image: The image file; its filename becomes the storage key.
    """
    try:
        if image is None or not image.filename:
            raise UploadRequestError("Request has no 'image' file")

        form = await request.form()
        description = form.get("description")
        if description is not None and not isinstance(description, str):
            raise UploadRequestError("'description' must be a text field")

        content = await image.read()
        payload = UploadedImage(
            filename=image.filename,
            content_type=image.content_type or "application/octet-stream",
            content=content,
        )
        await run_in_threadpool(pipeline.run, payload, description)

    except UploadError as exc:
        logger.error(
            "Error uploading image (%s): %s [cause: %r]",
            type(exc).__name__,
            exc,
            exc.__cause__,
        )
        return PlainTextResponse(ERROR_MESSAGE, status_code=500)
    except Exception as exc:
        logger.exception("Error uploading image: %s", exc)
        return PlainTextResponse(ERROR_MESSAGE, status_code=500)

    return PlainTextResponse(SUCCESS_MESSAGE, status_code=200)
