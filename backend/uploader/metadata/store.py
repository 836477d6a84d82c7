"""Relational store for upload metadata.

One row per successful upload goes into ``image_metadata``:
    - image_url:   Presigned URL returned by the object store
    - uploaded_at: Database server time at insert (``NOW()``)
    - description: Caller-supplied text, stored as given (NULL if absent)

Connection Lifetime:
    A single connection is opened by ``connect()`` at application startup and
    released by ``close()`` at shutdown. The engine uses ``NullPool``, so
    nothing reconnects behind the store's back. If the connection was never
    established, or the driver reports it lost (the connection is
    invalidated), it is dropped and every insert raises
    ``MetadataWriteError`` until the process is restarted.

Thread Safety:
    A DBAPI connection is NOT thread-safe, and FastAPI runs the pipeline on
    its thread pool. Statements on the shared connection are serialized with
    a lock.

Usage:
    store = MetadataStore(settings.database.url)
    store.connect()
    store.insert(url, "my cat")
    store.close()
"""
import logging
import threading
from typing import Any, Dict, Optional

from sqlalchemy import create_engine, func, insert
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from ..exceptions import MetadataWriteError
from .schema import image_metadata, metadata_obj

logger = logging.getLogger(__name__)


class MetadataStore:
    """Data-access object for the ``image_metadata`` table.

    Args:
        url: SQLAlchemy database URL.
        engine_options: Extra keyword arguments for ``create_engine``.
    """

    def __init__(self, url: str, engine_options: Optional[Dict[str, Any]] = None) -> None:
        self._url = url
        self._engine_options = engine_options or {}
        self._engine: Optional[Engine] = None
        self._connection: Optional[Connection] = None
        self._lock = threading.Lock()

    @property
    def connected(self) -> bool:
        return self._connection is not None and not self._connection.invalidated

    def connect(self) -> bool:
        """Open the shared connection.

        Failure is logged and reported through the return value; it never
        raises, so the HTTP server can still start in a degraded mode.

        Returns:
            True if the connection is open.
        """
        if self._connection is not None:
            return True
        try:
            self._engine = create_engine(self._url, **{**self._engine_options, "poolclass": NullPool})
            self._connection = self._engine.connect()
        except SQLAlchemyError as exc:
            logger.error("Could not connect to metadata database: %s", exc)
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None
            return False

        logger.info("Connected to metadata database (%s)", self._engine.url.render_as_string())
        return True

    def create_schema(self) -> None:
        """Create ``image_metadata`` if it does not exist."""
        if self._connection is None:
            raise MetadataWriteError("Database connection is not available")
        with self._lock:
            metadata_obj.create_all(self._connection)
            self._connection.commit()

    def insert(self, image_url: str, description: Optional[str]) -> None:
        """Insert one metadata row, stamped with the database's current time.

        Raises:
            MetadataWriteError: If there is no connection or the insert fails.
        """
        stmt = insert(image_metadata).values(
            image_url=image_url,
            uploaded_at=func.now(),
            description=description,
        )
        with self._lock:
            if self._connection is not None and self._connection.invalidated:
                self._discard()
            if self._connection is None:
                raise MetadataWriteError("Database connection is not available")
            try:
                self._connection.execute(stmt)
                self._connection.commit()
            except SQLAlchemyError as exc:
                self._rollback()
                if self._connection.invalidated:
                    self._discard()
                raise MetadataWriteError(f"Failed to store metadata: {exc}") from exc

        logger.info("Stored metadata row for %s", image_url.split("?", 1)[0])

    def _rollback(self) -> None:
        try:
            self._connection.rollback()
        except SQLAlchemyError as exc:
            logger.warning("Rollback after failed insert also failed: %s", exc)

    def _discard(self) -> None:
        """Drop a lost connection; later inserts fail instead of reconnecting."""
        logger.error("Metadata database connection lost; uploads will fail until restart")
        try:
            self._connection.close()
        except SQLAlchemyError as exc:
            logger.warning("Error closing lost metadata connection: %s", exc)
        self._connection = None

    def close(self) -> None:
        """Release the connection and dispose the engine. Safe to call twice."""
        if self._connection is not None:
            try:
                self._connection.close()
            except SQLAlchemyError as exc:
                logger.warning("Error closing metadata connection: %s", exc)
            self._connection = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Metadata database connection closed")
