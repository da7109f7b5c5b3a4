"""
File-related Pydantic schemas.

This module contains schemas for uploaded files and their parsed rows.
"""

from typing import Any, Dict, List, Optional
from pydantic import ConfigDict, Field
from datetime import datetime

from api.schemas.common import APIModel
from services.storage_service import format_file_size


class FileSummary(APIModel):
    """File summary returned after upload or replacement."""

    id: str = Field(..., description="File ID")
    original_name: str = Field(..., description="Filename as uploaded")
    stored_name: str = Field(..., description="Generated on-disk filename")
    mime_type: Optional[str] = Field(None, description="Declared MIME type")
    size_bytes: int = Field(..., description="File size in bytes")
    upload_date: datetime = Field(..., description="Upload timestamp")
    has_excel_data: bool = Field(..., description="Whether spreadsheet rows were found")
    total_rows: int = Field(..., description="Number of parsed rows")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "0b6f3c1e-5f3a-4a7e-9a55-2f1e8f3f6c10",
                "originalName": "leads.xlsx",
                "storedName": "file-1760000000000-123456789.xlsx",
                "mimeType": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                "sizeBytes": 10240,
                "uploadDate": "2025-10-15T12:00:00",
                "hasExcelData": True,
                "totalRows": 25
            }
        }
    )


class FileListItem(FileSummary):
    """File entry in the paginated listing, including its rows."""

    size_formatted: str = Field(..., description="Human readable size")
    storage_path: str = Field(..., description="Path to stored file")
    headers: List[str] = Field(default_factory=list, description="Headers derived from the first row")
    rows: List[Dict[str, Any]] = Field(default_factory=list, description="Parsed row mappings")

    @classmethod
    def from_record(cls, record, **extra):
        """Create from a FileRecord with derived fields."""
        return cls(
            id=record.id,
            original_name=record.original_name,
            stored_name=record.stored_name,
            mime_type=record.mime_type,
            size_bytes=record.size_bytes,
            upload_date=record.upload_date,
            has_excel_data=record.has_excel_data,
            total_rows=record.total_rows,
            size_formatted=format_file_size(record.size_bytes),
            storage_path=record.storage_path,
            headers=record.headers,
            rows=record.rows or [],
            **extra
        )


class FileDetail(FileListItem):
    """Detailed file information."""

    file_exists: bool = Field(..., description="Whether the stored file is present on disk")


class FileUploadResponse(APIModel):
    """Response after a file has been uploaded or replaced."""

    message: str = Field(..., description="Result message")
    file: FileSummary


class FilePagination(APIModel):
    current_page: int
    total_pages: int
    total_files: int
    files_per_page: int
    has_next_page: bool
    has_prev_page: bool


class FileListData(APIModel):
    files: List[FileListItem]
    pagination: FilePagination


class FileListResponse(APIModel):
    """Paginated file list response."""

    success: bool = True
    data: FileListData


class FileDetailResponse(APIModel):
    success: bool = True
    data: FileDetail


class FileInfo(APIModel):
    id: str
    original_name: str
    stored_name: str
    upload_date: datetime


class SheetInfo(APIModel):
    headers: List[str]
    total_rows: int


class RowPagination(APIModel):
    current_page: int
    total_pages: int
    total_rows: int
    rows_per_page: int
    has_next_page: bool
    has_prev_page: bool
    start_row: int
    end_row: int


class FileRowsData(APIModel):
    file_info: FileInfo
    sheet_info: SheetInfo
    rows: List[Dict[str, Any]]
    pagination: RowPagination


class FileRowsResponse(APIModel):
    """One page of a file's parsed rows."""

    success: bool = True
    data: FileRowsData


class FileDeleteResponse(APIModel):
    """Response when a file is soft deleted."""

    success: bool = True
    message: str = Field(..., description="Success message")
    id: str = Field(..., description="Deleted file ID")
    deleted_at: datetime = Field(..., description="Soft delete timestamp")
    deleted_by: Optional[str] = Field(None, description="User that deleted the file")
