"""
Dependency injection utilities for FastAPI.

This module provides reusable dependencies for database sessions, the
acting user, upload handling and the service objects. Services are built
per request from these handles rather than kept as module singletons.
"""

import logging
from typing import Generator, Optional
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from fastapi import Depends, Header, UploadFile

from api.config import settings
from services.call_service import CallService
from services.exceptions import UploadRejectedError
from services.feedback_service import FeedbackService
from services.file_service import FileService
from services.spreadsheet_service import SpreadsheetIngestor
from services.storage_service import StorageService, StoredUpload

logger = logging.getLogger(__name__)


def build_engine(database_url: str):
    """Create the database engine; pool options only apply to server databases."""
    if database_url.startswith('sqlite'):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=settings.DEBUG
        )

    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
        echo=settings.DEBUG
    )


# Create database engine
engine = build_engine(settings.DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Get database session dependency.

    Yields database session and ensures it's closed after use.

    Usage:
        @app.get("/endpoint")
        def endpoint(db: Session = Depends(get_db)):
            # Use db session
            pass
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    x_user_id: Optional[str] = Header(None, alias=settings.USER_ID_HEADER)
) -> Optional[str]:
    """
    Get the acting user from the request header.

    There is no authentication; the header is optional and only recorded
    for auditing (e.g. who soft deleted a file).
    """
    return x_user_id or None


def get_storage() -> StorageService:
    """Storage service bound to the configured upload directory."""
    return StorageService(
        upload_dir=settings.UPLOAD_DIR,
        allowed_extensions=settings.ALLOWED_EXTENSIONS,
        allowed_mime_types=settings.ALLOWED_MIME_TYPES
    )


def get_ingestor() -> SpreadsheetIngestor:
    return SpreadsheetIngestor()


def get_file_service(
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
    ingestor: SpreadsheetIngestor = Depends(get_ingestor)
) -> FileService:
    return FileService(
        db_session=db,
        storage=storage,
        ingestor=ingestor,
        strict_parse_on_upload=settings.STRICT_PARSE_ON_UPLOAD,
        strict_parse_on_update=settings.STRICT_PARSE_ON_UPDATE,
        default_page_size=settings.DEFAULT_PAGE_SIZE,
        default_row_page_size=settings.DEFAULT_ROW_PAGE_SIZE,
        max_page_size=settings.MAX_PAGE_SIZE,
        max_row_page_size=settings.MAX_ROW_PAGE_SIZE
    )


def get_call_service(db: Session = Depends(get_db)) -> CallService:
    return CallService(
        db_session=db,
        report_timezone=settings.REPORT_TIMEZONE,
        min_duration_seconds=settings.CHART_MIN_DURATION_SECONDS
    )


def get_feedback_service(db: Session = Depends(get_db)) -> FeedbackService:
    return FeedbackService(db_session=db)


def store_upload(file: Optional[UploadFile], storage: StorageService) -> StoredUpload:
    """
    Validate and store a multipart upload.

    Type checks happen before anything is written; the size limit is
    enforced while streaming.

    Raises:
        UploadRejectedError: If no file was sent, or it violates the
                             type or size constraints
    """
    if file is None or not file.filename:
        raise UploadRejectedError("No file uploaded")

    storage.validate_upload(file.filename, file.content_type)

    return storage.save_upload(
        file.file,
        original_name=file.filename,
        mime_type=file.content_type,
        max_bytes=settings.max_upload_size_bytes
    )
