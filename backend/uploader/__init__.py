"""Image uploader service.

Accepts an image over HTTP, stores it in S3, and records a presigned URL
and description in the ``image_metadata`` table.

Modules:
    - storage:  S3 object store
    - metadata: MySQL metadata store
    - upload:   POST /upload route and the upload pipeline
"""

__version__ = "1.0.0"
