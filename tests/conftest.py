"""
Pytest configuration and fixtures for the callsheet tests.
"""

import os
import tempfile

# Point the application at throwaway locations before it is imported
_TEST_ROOT = tempfile.mkdtemp(prefix='callsheet-tests-')
os.environ.setdefault('DATABASE_URL', f"sqlite:///{os.path.join(_TEST_ROOT, 'app.db')}")
os.environ.setdefault('UPLOAD_DIR', os.path.join(_TEST_ROOT, 'uploads'))
os.environ.setdefault('LOG_FILE', os.path.join(_TEST_ROOT, 'api.log'))

import pytest
import openpyxl
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from dotenv import load_dotenv

from api.config import settings
from backend.models import Base
from services.call_service import CallService
from services.feedback_service import FeedbackService
from services.file_service import FileService
from services.spreadsheet_service import SpreadsheetIngestor
from services.storage_service import StorageService

# Load environment
load_dotenv()

# Test database URL (in-memory SQLite unless a separate test database is given)
TEST_DATABASE_URL = os.getenv('TEST_DATABASE_URL', 'sqlite://')

XLSX_MIME = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
CSV_MIME = 'text/csv'


@pytest.fixture(scope='function')
def engine():
    """Create a fresh test database for each test."""
    if TEST_DATABASE_URL.startswith('sqlite'):
        eng = create_engine(
            TEST_DATABASE_URL,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool
        )
    else:
        eng = create_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture(scope='function')
def session(engine):
    """Create a new database session for a test."""
    Session = sessionmaker(bind=engine, autoflush=False)
    sess = Session()

    yield sess

    sess.close()


@pytest.fixture
def storage(tmp_path):
    """Storage service writing into a per-test upload directory."""
    return StorageService(
        upload_dir=str(tmp_path / 'uploads'),
        allowed_extensions=settings.ALLOWED_EXTENSIONS,
        allowed_mime_types=settings.ALLOWED_MIME_TYPES
    )


@pytest.fixture
def ingestor():
    return SpreadsheetIngestor()


@pytest.fixture
def file_service(session, storage, ingestor):
    return FileService(db_session=session, storage=storage, ingestor=ingestor)


@pytest.fixture
def call_service(session):
    return CallService(db_session=session, report_timezone='Asia/Kolkata')


@pytest.fixture
def feedback_service(session):
    return FeedbackService(db_session=session)


@pytest.fixture
def make_xlsx(tmp_path):
    """Build an .xlsx file whose first sheet holds the given rows."""
    def _make(rows, name='sheet.xlsx', extra_sheet_rows=None):
        wb = openpyxl.Workbook()
        ws = wb.active
        for row in rows:
            ws.append(row)
        if extra_sheet_rows is not None:
            other = wb.create_sheet('Other')
            for row in extra_sheet_rows:
                other.append(row)
        path = tmp_path / name
        wb.save(path)
        return str(path)
    return _make


@pytest.fixture
def make_file(tmp_path):
    """Write raw bytes or text to a file in the test directory."""
    def _make(name, content):
        path = tmp_path / name
        if isinstance(content, str):
            path.write_text(content, encoding='utf-8')
        else:
            path.write_bytes(content)
        return str(path)
    return _make


@pytest.fixture
def store(storage):
    """Copy a local file into storage the way an upload would arrive."""
    def _store(path, original_name=None, mime_type=XLSX_MIME):
        with open(path, 'rb') as f:
            return storage.save_upload(
                f,
                original_name=original_name or os.path.basename(path),
                mime_type=mime_type
            )
    return _store


@pytest.fixture
def lead_rows():
    """Header plus 25 data rows with an Index column counting from 1."""
    return [['Index', 'Name', 'Phone']] + [
        [i, f"Lead {i}", 5550000 + i] for i in range(1, 26)
    ]


@pytest.fixture
def client(session, storage):
    """API client bound to the test database and upload directory."""
    from api.dependencies import get_db, get_storage
    from api.main import app

    app.dependency_overrides[get_db] = lambda: session
    app.dependency_overrides[get_storage] = lambda: storage

    yield TestClient(app)

    app.dependency_overrides.clear()
