"""
File Service - Upload, listing, retrieval, replacement and soft delete.

Files are never removed physically: a delete marks the record with
is_deleted/deleted_at/deleted_by and all regular reads skip such records.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from backend.models.schema import FileRecord
from services.exceptions import NotFoundError, ValidationError
from services.pagination import max_page_for, offset_for, page_metadata, parse_positive_int
from services.spreadsheet_service import SpreadsheetIngestor
from services.storage_service import StorageService, StoredUpload

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
DEFAULT_ROW_PAGE_SIZE = 50
DEFAULT_MAX_PAGE_SIZE = 100
DEFAULT_MAX_ROW_PAGE_SIZE = 1000


def validate_record_id(record_id: Any, label: str = 'file') -> str:
    """
    Check an identifier is a well-formed record id.

    Raises:
        ValidationError: If the identifier is missing or malformed
    """
    try:
        return str(uuid.UUID(str(record_id)))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(f"Invalid {label} id", detail={'id': record_id})


class FileService:
    """
    Framework-agnostic file service.

    All collaborators are passed in explicitly: the database session, the
    storage service and the spreadsheet ingestor.
    """

    def __init__(
        self,
        db_session: Session,
        storage: StorageService,
        ingestor: Optional[SpreadsheetIngestor] = None,
        strict_parse_on_upload: bool = False,
        strict_parse_on_update: bool = True,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        default_row_page_size: int = DEFAULT_ROW_PAGE_SIZE,
        max_page_size: int = DEFAULT_MAX_PAGE_SIZE,
        max_row_page_size: int = DEFAULT_MAX_ROW_PAGE_SIZE
    ):
        """
        Initialize file service.

        Args:
            db_session: SQLAlchemy database session
            storage: Storage service owning the upload directory
            ingestor: Spreadsheet ingestor (default: SpreadsheetIngestor())
            strict_parse_on_upload: Reject uploads whose spreadsheet fails to parse
            strict_parse_on_update: Reject replacements whose spreadsheet fails to parse
            default_page_size: File listing page size when none is given
            default_row_page_size: Row listing page size when none is given
            max_page_size: Upper bound for the file listing page size
            max_row_page_size: Upper bound for the row listing page size
        """
        self.session = db_session
        self.storage = storage
        self.ingestor = ingestor or SpreadsheetIngestor()
        self.strict_parse_on_upload = strict_parse_on_upload
        self.strict_parse_on_update = strict_parse_on_update
        self.default_page_size = default_page_size
        self.default_row_page_size = default_row_page_size
        self.max_page_size = max_page_size
        self.max_row_page_size = max_row_page_size

    def upload(self, stored: StoredUpload) -> FileRecord:
        """
        Create a file record for a stored upload, with its parsed rows.

        Non-spreadsheet files are kept with zero rows. On any failure the
        stored upload is removed again.
        """
        try:
            rows = self.ingestor.ingest(
                stored.path, stored.original_name, stored.mime_type,
                strict=self.strict_parse_on_upload
            )

            record = FileRecord(
                original_name=stored.original_name,
                stored_name=stored.stored_name,
                mime_type=stored.mime_type,
                size_bytes=stored.size_bytes,
                storage_path=stored.path,
                upload_date=datetime.utcnow(),
                rows=rows
            )
            self.session.add(record)
            self.session.commit()
        except Exception:
            self.session.rollback()
            self.storage.delete_file(stored.path)
            raise

        logger.info(f"Uploaded file {record.id}: {stored.original_name} ({len(rows)} rows)")
        return record

    def list_files(self, page: Any = None, page_size: Any = None) -> Tuple[List[FileRecord], Dict[str, Any]]:
        """
        List non-deleted files, newest first.

        Returns:
            (files, pagination) where pagination holds current_page,
            total_pages, total_files, files_per_page, has_next_page and
            has_prev_page
        """
        page_size = parse_positive_int(page_size, self.default_page_size, self.max_page_size)
        page = parse_positive_int(page, 1, max_page_for(page_size))

        query = self.session.query(FileRecord).filter(FileRecord.is_deleted.is_(False))

        total = query.count()

        files = query.order_by(FileRecord.upload_date.desc())\
            .offset(offset_for(page, page_size))\
            .limit(page_size)\
            .all()

        pagination = page_metadata(page, page_size, total)
        pagination.update({
            'total_files': total,
            'files_per_page': page_size,
        })

        return files, pagination

    def get_file(self, file_id: Any, include_deleted: bool = False) -> FileRecord:
        """
        Fetch a file record.

        Args:
            file_id: File identifier
            include_deleted: Administrative bypass that also returns
                             soft-deleted records

        Raises:
            ValidationError: If the id is malformed
            NotFoundError: If no (visible) record exists
        """
        file_id = validate_record_id(file_id)

        query = self.session.query(FileRecord).filter(FileRecord.id == file_id)
        if not include_deleted:
            query = query.filter(FileRecord.is_deleted.is_(False))

        record = query.first()
        if record is None:
            raise NotFoundError("File not found", detail={'file_id': file_id})

        return record

    def file_on_disk(self, record: FileRecord) -> bool:
        return self.storage.file_exists(record.storage_path)

    def get_download(self, file_id: Any) -> Tuple[str, str]:
        """
        Resolve the stored path and download name of a file.

        Raises:
            NotFoundError: If the record or the stored file is missing
        """
        record = self.get_file(file_id)

        if not self.file_on_disk(record):
            logger.warning(f"Stored file missing for {record.id}: {record.storage_path}")
            raise NotFoundError("File not found on disk", detail={'file_id': record.id})

        return record.storage_path, record.original_name

    def update_file(self, file_id: Any, stored: StoredUpload) -> FileRecord:
        """
        Replace a file's content, metadata and rows with a new upload.

        The previous stored file is deleted only after the new upload has
        been parsed and the record updated. Whenever the update fails the
        new upload is deleted.
        """
        try:
            record = self.get_file(file_id)

            rows = self.ingestor.ingest(
                stored.path, stored.original_name, stored.mime_type,
                strict=self.strict_parse_on_update
            )

            previous_path = record.storage_path

            record.original_name = stored.original_name
            record.stored_name = stored.stored_name
            record.mime_type = stored.mime_type
            record.size_bytes = stored.size_bytes
            record.storage_path = stored.path
            record.rows = rows
            record.upload_date = datetime.utcnow()

            self.session.commit()
        except Exception:
            self.session.rollback()
            self.storage.delete_file(stored.path)
            raise

        if previous_path != stored.path:
            self.storage.delete_file(previous_path)

        logger.info(f"Updated file {record.id}: {stored.original_name} ({len(rows)} rows)")
        return record

    def soft_delete(self, file_id: Any, actor_id: Optional[str] = None) -> FileRecord:
        """
        Mark a file as deleted.

        The record and the stored file are kept; only the audit fields
        change.
        """
        record = self.get_file(file_id)

        record.is_deleted = True
        record.deleted_at = datetime.utcnow()
        record.deleted_by = actor_id
        self.session.commit()

        logger.info(f"File {record.id} soft deleted by {actor_id or 'anonymous'}")
        return record

    def restore(self, file_id: Any) -> FileRecord:
        """Clear the soft delete marker of a file."""
        record = self.get_file(file_id, include_deleted=True)

        record.is_deleted = False
        record.deleted_at = None
        record.deleted_by = None
        self.session.commit()

        logger.info(f"File {record.id} restored")
        return record

    def get_rows(self, file_id: Any, page: Any = None, page_size: Any = None) -> Dict[str, Any]:
        """
        Return one page of a file's parsed rows.

        Raises:
            ValidationError: If the file has no row data

        Returns:
            Dictionary with file, headers, total_rows, rows and pagination
        """
        record = self.get_file(file_id)

        rows = record.rows or []
        if not rows:
            raise ValidationError("No Excel data found for this file", detail={'file_id': record.id})

        page_size = parse_positive_int(page_size, self.default_row_page_size, self.max_row_page_size)
        page = parse_positive_int(page, 1, max_page_for(page_size))

        total_rows = len(rows)
        skip = offset_for(page, page_size)

        pagination = page_metadata(page, page_size, total_rows)
        pagination.update({
            'total_rows': total_rows,
            'rows_per_page': page_size,
            'start_row': skip + 1,
            'end_row': min(skip + page_size, total_rows),
        })

        return {
            'file': record,
            'headers': record.headers,
            'total_rows': total_rows,
            'rows': rows[skip:skip + page_size],
            'pagination': pagination,
        }
