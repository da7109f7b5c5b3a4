"""
Files router - Upload, list, inspect, replace, download and delete files.

Service errors (validation, not found, rejected uploads) propagate to the
exception handlers registered in api.main. Handlers are plain functions so
that upload streaming and spreadsheet parsing run in the threadpool.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse

from api.dependencies import get_current_user, get_file_service, get_storage, store_upload
from api.schemas.file_schema import (
    FileDeleteResponse, FileDetail, FileDetailResponse, FileInfo, FileListItem,
    FileListResponse, FileRowsResponse, FileSummary, FileUploadResponse
)
from services.file_service import FileService
from services.storage_service import StorageService

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/files', tags=['files'])


@router.post('/upload', response_model=FileUploadResponse)
def upload_file(
    file: Optional[UploadFile] = File(None, description="Spreadsheet to upload (.xlsx, .xls or .csv)"),
    storage: StorageService = Depends(get_storage),
    service: FileService = Depends(get_file_service)
):
    """
    Upload a file and store the rows of its first sheet.

    **Workflow:**
    1. Validate extension and MIME type
    2. Stream the file to the upload directory (max 90 MiB)
    3. Parse the first sheet into row mappings
    4. Create the file record

    A spreadsheet that cannot be parsed is still stored, with zero rows.
    """
    logger.info(f"Upload request: {file.filename if file else None}")

    stored = store_upload(file, storage)
    record = service.upload(stored)

    return FileUploadResponse(
        message="File uploaded successfully",
        file=FileSummary.model_validate(record)
    )


@router.get('', response_model=FileListResponse)
def list_files(
    page: Optional[str] = Query(None, description="Page number (default: 1)"),
    limit: Optional[str] = Query(None, description="Files per page (default: 10)"),
    service: FileService = Depends(get_file_service)
):
    """
    List files ordered by upload date (newest first).

    Deleted files are not listed. Missing or non-numeric ``page``/``limit``
    fall back to the defaults; ``limit`` is capped.

    **Example:**
    ```bash
    curl "http://localhost:8000/api/files?page=2&limit=20"
    ```
    """
    files, pagination = service.list_files(page, limit)

    return FileListResponse(
        data={
            'files': [FileListItem.from_record(record) for record in files],
            'pagination': pagination,
        }
    )


@router.get('/download/{file_id}')
def download_file(
    file_id: str,
    service: FileService = Depends(get_file_service)
):
    """Stream the stored file back under its original filename."""
    path, original_name = service.get_download(file_id)
    return FileResponse(path, filename=original_name)


@router.get('/excel/{file_id}', response_model=FileRowsResponse)
def get_file_rows(
    file_id: str,
    page: Optional[str] = Query(None, description="Page number (default: 1)"),
    limit: Optional[str] = Query(None, description="Rows per page (default: 50)"),
    service: FileService = Depends(get_file_service)
):
    """
    Get one page of a file's parsed rows.

    **Example:**
    ```bash
    curl "http://localhost:8000/api/files/excel/<id>?page=2&limit=10"
    ```

    Returns 400 when the file has no spreadsheet rows.
    """
    result = service.get_rows(file_id, page, limit)

    return FileRowsResponse(
        data={
            'file_info': FileInfo.model_validate(result['file']),
            'sheet_info': {
                'headers': result['headers'],
                'total_rows': result['total_rows'],
            },
            'rows': result['rows'],
            'pagination': result['pagination'],
        }
    )


@router.get('/{file_id}', response_model=FileDetailResponse)
def get_file(
    file_id: str,
    service: FileService = Depends(get_file_service)
):
    """Get file details including headers, rows and on-disk status."""
    record = service.get_file(file_id)

    return FileDetailResponse(
        data=FileDetail.from_record(record, file_exists=service.file_on_disk(record))
    )


@router.put('/{file_id}', response_model=FileUploadResponse)
def update_file(
    file_id: str,
    file: Optional[UploadFile] = File(None, description="Replacement spreadsheet"),
    storage: StorageService = Depends(get_storage),
    service: FileService = Depends(get_file_service)
):
    """
    Replace a file's content and rows.

    The previous stored file is removed once the new one is accepted.
    A spreadsheet that fails to parse is rejected with 400 and discarded.
    """
    logger.info(f"Update request for {file_id}: {file.filename if file else None}")

    stored = store_upload(file, storage)
    record = service.update_file(file_id, stored)

    return FileUploadResponse(
        message="File updated successfully",
        file=FileSummary.model_validate(record)
    )


@router.delete('/{file_id}', response_model=FileDeleteResponse)
def delete_file(
    file_id: str,
    service: FileService = Depends(get_file_service),
    current_user: Optional[str] = Depends(get_current_user)
):
    """
    Soft delete a file.

    The record and stored file are kept for audit; the file disappears
    from listings and lookups.
    """
    record = service.soft_delete(file_id, actor_id=current_user)

    return FileDeleteResponse(
        message="File deleted successfully",
        id=record.id,
        deleted_at=record.deleted_at,
        deleted_by=record.deleted_by
    )
