"""
SQLAlchemy models for uploaded spreadsheet files.

This module defines the declarative base shared by all models and the
file record, matching the schema defined in Alembic migrations.
"""

import uuid
from datetime import datetime
from sqlalchemy import (
    Boolean, Column, Integer, String, JSON, TIMESTAMP, Index
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Plain JSON keeps the key order of each row (JSONB does not); headers
# are read from the first row
JSONType = JSON()


def new_id() -> str:
    """Generate an opaque record identifier."""
    return str(uuid.uuid4())


class FileRecord(Base):
    """Represents an uploaded file and the rows parsed from its first sheet."""

    __tablename__ = 'files'
    __table_args__ = (
        Index('idx_files_upload_date', 'upload_date'),
        Index('idx_files_is_deleted', 'is_deleted'),
        {'comment': 'Uploaded files with parsed spreadsheet rows'}
    )

    id = Column(
        String(36),
        primary_key=True,
        default=new_id,
        nullable=False
    )
    original_name = Column(
        String(255),
        nullable=False,
        comment='Filename as uploaded by the client'
    )
    stored_name = Column(
        String(255),
        nullable=False,
        comment='Generated filename inside the upload directory'
    )
    mime_type = Column(
        String(255),
        nullable=True,
        comment='Declared MIME type'
    )
    size_bytes = Column(
        Integer,
        nullable=False,
        default=0,
        comment='File size in bytes'
    )
    storage_path = Column(
        String(512),
        nullable=False,
        comment='Path to stored file'
    )
    upload_date = Column(
        TIMESTAMP,
        default=datetime.utcnow,
        nullable=False,
        comment='Upload (or last replacement) timestamp'
    )
    rows = Column(
        JSONType,
        default=list,
        nullable=False,
        comment='Row mappings (header -> cell value) from the first sheet'
    )
    is_deleted = Column(
        Boolean,
        default=False,
        nullable=False,
        comment='Soft delete flag'
    )
    deleted_at = Column(
        TIMESTAMP,
        nullable=True,
        comment='Soft delete timestamp'
    )
    deleted_by = Column(
        String(255),
        nullable=True,
        comment='User that soft deleted the file'
    )

    def __repr__(self):
        return f"<FileRecord(id='{self.id}', original_name='{self.original_name}')>"

    @property
    def headers(self) -> list:
        """Column headers, derived from the keys of the first row."""
        if self.rows:
            return list(self.rows[0].keys())
        return []

    @property
    def total_rows(self) -> int:
        return len(self.rows or [])

    @property
    def has_excel_data(self) -> bool:
        return self.total_rows > 0
