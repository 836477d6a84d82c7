"""Failures of the upload pipeline.

Each client wraps the underlying library error with ``raise ... from exc``
so the cause is logged at the HTTP boundary. The client only ever sees a
generic 500, whichever of these was raised.
"""


class UploadError(Exception):
    """Base class for every upload failure."""


class StorageWriteError(UploadError):
    """The object store was unreachable or rejected the write."""


class UrlGenerationError(UploadError):
    """The object store could not produce a presigned read URL."""


class MetadataWriteError(UploadError):
    """No database connection, or the metadata insert was rejected."""


class UploadRequestError(UploadError):
    """The request itself could not be handled (e.g. no ``image`` file)."""
