"""Table definition for upload metadata.

Production databases already have ``image_metadata``; the definition here
lets a fresh database (development, tests) be created with the same columns.
Only ``image_url``, ``uploaded_at`` and ``description`` are ever written.
"""
from sqlalchemy import Column, DateTime, Integer, MetaData, Table, Text

metadata_obj = MetaData()

image_metadata = Table(
    "image_metadata",
    metadata_obj,
    Column("id", Integer, primary_key=True, autoincrement=True),
    # presigned URLs embed credentials and easily exceed VARCHAR(255)
    Column("image_url", Text, nullable=False),
    Column("uploaded_at", DateTime, nullable=False),
    Column("description", Text, nullable=True),
)
