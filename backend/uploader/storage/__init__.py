"""Object storage for uploaded images.

``ObjectStore`` is the interface the upload pipeline depends on;
``S3ObjectStore`` is the boto3-backed implementation used in production.
"""
from .base import ObjectStore
from .s3 import S3ObjectStore

__all__ = [
    "ObjectStore",
    "S3ObjectStore",
]
