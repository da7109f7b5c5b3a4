"""
Storage Service - Uploaded file storage and management operations.

This module provides utilities for saving uploads into the upload
directory, enforcing the type and size constraints, and cleanup.
"""

import random
import shutil
import time
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Optional
from datetime import datetime

from services.exceptions import UploadRejectedError

logger = logging.getLogger(__name__)

# Default storage directory
DEFAULT_UPLOAD_DIR = 'uploads/'
PARTIAL_SUFFIX = '.part'
CHUNK_SIZE = 1024 * 1024


@dataclass
class StoredUpload:
    """An upload that has been written to the upload directory."""

    original_name: str
    stored_name: str
    mime_type: Optional[str]
    size_bytes: int
    path: str


def format_file_size(size_bytes: int) -> str:
    """
    Render a byte count for display.

    Examples: 0 -> '0 Bytes', 1536 -> '1.5 KB', 5242880 -> '5 MB'
    """
    if not size_bytes:
        return '0 Bytes'

    units = ['Bytes', 'KB', 'MB', 'GB']
    idx = 0
    while idx < len(units) - 1 and size_bytes >= 1024 ** (idx + 1):
        idx += 1
    value = round(size_bytes / 1024 ** idx, 2)

    # Drop trailing zeros: 1.50 -> 1.5, 5.00 -> 5
    return f"{value:g} {units[idx]}"


class StorageService:
    """
    Framework-agnostic storage service for uploaded files.

    Handles upload validation, streaming to disk and cleanup operations.
    """

    def __init__(self, upload_dir: str = DEFAULT_UPLOAD_DIR,
                 allowed_extensions: Optional[Iterable[str]] = None,
                 allowed_mime_types: Optional[Iterable[str]] = None):
        """
        Initialize storage service.

        Args:
            upload_dir: Directory to store uploaded files (default: 'uploads/')
            allowed_extensions: Accepted filename extensions (None accepts any)
            allowed_mime_types: Accepted MIME types (None accepts any)
        """
        self.upload_dir = upload_dir
        self.allowed_extensions = (
            [e.lower() for e in allowed_extensions] if allowed_extensions is not None else None
        )
        self.allowed_mime_types = (
            list(allowed_mime_types) if allowed_mime_types is not None else None
        )
        self._ensure_directory_exists()

    def _ensure_directory_exists(self):
        """Ensure the upload directory exists."""
        Path(self.upload_dir).mkdir(parents=True, exist_ok=True)
        logger.debug(f"Storage directory ensured: {self.upload_dir}")

    def validate_upload(self, original_name: Optional[str], mime_type: Optional[str]) -> None:
        """
        Check the filename extension and MIME type against the allow-lists.

        Both must match.

        Raises:
            UploadRejectedError: If either check fails
        """
        ext = Path(original_name or '').suffix.lower()

        ext_ok = self.allowed_extensions is None or ext in self.allowed_extensions
        mime_ok = self.allowed_mime_types is None or mime_type in self.allowed_mime_types

        if not (ext_ok and mime_ok):
            logger.warning(f"Rejected upload {original_name!r} ({mime_type})")
            allowed = ', '.join(self.allowed_extensions or [])
            raise UploadRejectedError(
                f"Only {allowed} files are allowed!",
                detail={'filename': original_name, 'mime_type': mime_type}
            )

    def generate_stored_name(self, original_name: str) -> str:
        """Build a unique on-disk name: file-<epoch ms>-<random><ext>."""
        ext = Path(original_name).suffix
        timestamp = int(time.time() * 1000)
        random_num = random.randint(0, 999_999_999)
        return f"file-{timestamp}-{random_num}{ext}"

    def save_upload(self, source: BinaryIO, original_name: str,
                    mime_type: Optional[str] = None,
                    max_bytes: Optional[int] = None) -> StoredUpload:
        """
        Stream an upload into the upload directory.

        The content is written to a partial file first and renamed once
        complete, so an aborted or oversized upload never appears as a
        stored file.

        Args:
            source: Readable binary stream
            original_name: Filename as sent by the client
            mime_type: Declared MIME type
            max_bytes: Size limit, None for unlimited

        Returns:
            StoredUpload describing the stored file

        Raises:
            UploadRejectedError: If the upload exceeds ``max_bytes``
        """
        self._ensure_directory_exists()

        stored_name = self.generate_stored_name(original_name)
        dest_path = Path(self.upload_dir) / stored_name
        partial_path = dest_path.with_name(dest_path.name + PARTIAL_SUFFIX)

        size = 0
        try:
            with open(partial_path, 'wb') as out:
                for chunk in iter(lambda: source.read(CHUNK_SIZE), b''):
                    size += len(chunk)
                    if max_bytes is not None and size > max_bytes:
                        raise UploadRejectedError(
                            "File too large",
                            detail={'max_bytes': max_bytes}
                        )
                    out.write(chunk)
        except BaseException:
            if partial_path.exists():
                partial_path.unlink()
            raise

        shutil.move(str(partial_path), str(dest_path))
        logger.info(f"Stored upload: {original_name} -> {dest_path} ({size} bytes)")

        return StoredUpload(
            original_name=original_name,
            stored_name=stored_name,
            mime_type=mime_type,
            size_bytes=size,
            path=str(dest_path)
        )

    def file_exists(self, file_path: Optional[str]) -> bool:
        return bool(file_path) and Path(file_path).is_file()

    def delete_file(self, file_path: Optional[str]) -> bool:
        """
        Delete a file from storage.

        Args:
            file_path: Path to file to delete

        Returns:
            True if file was deleted, False if file didn't exist
        """
        if not file_path:
            return False

        path = Path(file_path)

        if path.exists():
            path.unlink()
            logger.info(f"Deleted file: {file_path}")
            return True
        else:
            logger.warning(f"File not found for deletion: {file_path}")
            return False

    def cleanup_partial_uploads(self, older_than_hours: int = 24) -> int:
        """
        Clean up partial upload files older than specified hours.

        Args:
            older_than_hours: Remove files older than this many hours

        Returns:
            Number of files deleted
        """
        upload_path = Path(self.upload_dir)

        if not upload_path.exists():
            return 0

        cutoff_time = datetime.now().timestamp() - (older_than_hours * 3600)

        deleted_count = 0

        for file_path in upload_path.glob(f"*{PARTIAL_SUFFIX}"):
            if file_path.is_file() and file_path.stat().st_mtime < cutoff_time:
                try:
                    file_path.unlink()
                    deleted_count += 1
                    logger.debug(f"Cleaned up partial upload: {file_path}")
                except OSError as e:
                    logger.error(f"Error deleting partial upload {file_path}: {e}")

        if deleted_count > 0:
            logger.info(f"Cleaned up {deleted_count} partial uploads")

        return deleted_count
