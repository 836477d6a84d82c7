"""Shared test fixtures for the image uploader.

S3 is replaced by an in-memory ``FakeObjectStore``; MySQL by a temporary
SQLite file reached through the real ``MetadataStore``.
"""
import threading
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select

from uploader.config import AppSettings
from uploader.exceptions import StorageWriteError, UrlGenerationError
from uploader.main import create_app
from uploader.metadata import MetadataStore, image_metadata
from uploader.storage import ObjectStore


class FakeObjectStore(ObjectStore):
    """In-memory ObjectStore with switchable failures."""

    def __init__(self, bucket: str = "test-bucket") -> None:
        self._bucket = bucket
        self._lock = threading.Lock()
        self.objects: Dict[str, Tuple[bytes, str]] = {}
        self.put_calls: List[str] = []
        self.writes: List[Tuple[str, bytes]] = []
        self.presign_calls: List[Tuple[str, int]] = []
        self.fail_put = False
        self.fail_presign = False

    @property
    def bucket(self) -> str:
        return self._bucket

    def put_object(self, key: str, body: bytes, content_type: str) -> None:
        if self.fail_put:
            raise StorageWriteError("simulated storage outage")
        with self._lock:
            self.objects[key] = (body, content_type)
            self.put_calls.append(key)
            self.writes.append((key, body))

    def presigned_get_url(self, key: str, expires_in: int) -> str:
        if self.fail_presign:
            raise UrlGenerationError("simulated presign failure")
        with self._lock:
            self.presign_calls.append((key, expires_in))
            n = len(self.presign_calls)
        return (
            f"https://{self._bucket}.s3.amazonaws.com/{quote(key)}"
            f"?X-Amz-Expires={expires_in}&X-Amz-Signature=sig{n}"
        )

    def resolve(self, url: str) -> Optional[bytes]:
        """Return the bytes a presigned URL points at, if the object exists."""
        prefix = f"https://{self._bucket}.s3.amazonaws.com/"
        path = url[len(prefix):].split("?", 1)[0]
        for key, (body, _) in self.objects.items():
            if quote(key) == path:
                return body
        return None


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'metadata.db'}"


@pytest.fixture
def metadata_store(db_url):
    """A connected MetadataStore on a fresh SQLite file."""
    store = MetadataStore(db_url, engine_options={"connect_args": {"check_same_thread": False}})
    assert store.connect()
    store.create_schema()
    yield store
    store.close()


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def fetch_rows(db_url) -> Callable[[], list]:
    """Read ``image_metadata`` through a separate connection."""
    def _fetch() -> list:
        engine = create_engine(db_url)
        try:
            with engine.connect() as conn:
                return list(conn.execute(select(image_metadata).order_by(image_metadata.c.id)))
        finally:
            engine.dispose()
    return _fetch


@pytest.fixture
def api_client(object_store, metadata_store):
    """TestClient over an app wired to the fake store and SQLite metadata."""
    app = create_app(
        settings=AppSettings(),
        object_store=object_store,
        metadata_store=metadata_store,
    )
    with TestClient(app) as client:
        yield client
