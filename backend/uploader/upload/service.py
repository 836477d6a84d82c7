"""UploadPipeline: store the image, presign it, record the metadata.

The three steps run in strict order and the first failure aborts the run.
There is no compensation: if presigning or the metadata insert fails, the
object written in step 1 stays in the bucket as an orphan.

The storage key is the client's filename, unmodified. Two uploads with the
same filename overwrite each other's object (last write wins) while each
still records its own row pointing at the shared key.
"""
import logging
from typing import Optional

from ..metadata import MetadataStore
from ..storage import ObjectStore
from .schemas import PRESIGNED_URL_EXPIRY_SECONDS, UploadedImage, UploadResult

logger = logging.getLogger(__name__)


class UploadPipeline:
    """Orchestrates one upload across the object store and the metadata store.

    Args:
        object_store:   Where image bytes are written.
        metadata_store: Where the presigned URL and description are recorded.
        url_expiry:     Presigned URL lifetime in seconds.
    """

    def __init__(
        self,
        object_store: ObjectStore,
        metadata_store: MetadataStore,
        url_expiry: int = PRESIGNED_URL_EXPIRY_SECONDS,
    ) -> None:
        self._object_store = object_store
        self._metadata_store = metadata_store
        self._url_expiry = url_expiry

    @property
    def object_store(self) -> ObjectStore:
        return self._object_store

    @property
    def metadata_store(self) -> MetadataStore:
        return self._metadata_store

    def run(self, image: UploadedImage, description: Optional[str]) -> UploadResult:
        """Upload ``image`` and record it with ``description``.

        Blocking; call it from a worker thread inside request handlers.

        Raises:
            StorageWriteError:  Step 1 failed; nothing was written.
            UrlGenerationError: Step 2 failed; the object is orphaned.
            MetadataWriteError: Step 3 failed; the object is orphaned.
        """
        key = image.filename

        self._object_store.put_object(key, image.content, image.content_type)
        image_url = self._object_store.presigned_get_url(key, self._url_expiry)
        self._metadata_store.insert(image_url, description)

        logger.info(
            "Upload complete: key=%s bucket=%s size=%d",
            key,
            self._object_store.bucket,
            len(image.content),
        )
        return UploadResult(key=key, image_url=image_url, description=description)
