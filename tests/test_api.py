"""
End-to-end tests for the HTTP API.

Requests go through the FastAPI app with the database session and upload
directory swapped for test instances. Payloads use camelCase keys.
"""

import inspect
import uuid

import pytest

from api.config import settings
from api.routers import calls, feedback, files

XLSX_MIME = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


@pytest.fixture
def upload(client, make_xlsx, lead_rows):
    """POST a 25-row spreadsheet and return the response body."""
    def _upload(rows=None, name='leads.xlsx'):
        path = make_xlsx(rows or lead_rows, name=name)
        with open(path, 'rb') as f:
            response = client.post('/api/files/upload', files={'file': (name, f, XLSX_MIME)})
        assert response.status_code == 200, response.text
        return response.json()
    return _upload


class TestHealth:

    def test_ping(self, client):
        response = client.get('/api/ping')

        assert response.status_code == 200
        assert response.json() == {'ping': 'pong'}

    def test_unknown_route(self, client):
        response = client.get('/api/nowhere')

        assert response.status_code == 404
        assert response.json()['error'] == "Resource not found"


class TestFileEndpoints:

    def test_upload(self, upload):
        body = upload()

        assert body['message'] == "File uploaded successfully"
        assert body['file']['originalName'] == 'leads.xlsx'
        assert body['file']['totalRows'] == 25
        assert body['file']['hasExcelData'] is True
        assert 'storedName' in body['file']

    def test_upload_without_file(self, client):
        response = client.post('/api/files/upload')

        assert response.status_code == 400
        assert response.json()['error'] == "No file uploaded"

    def test_upload_wrong_type(self, client):
        response = client.post(
            '/api/files/upload',
            files={'file': ('report.pdf', b'%PDF-1.4', 'application/pdf')}
        )

        assert response.status_code == 400
        assert 'allowed' in response.json()['error']

    def test_upload_too_large(self, client, storage, monkeypatch):
        monkeypatch.setattr(settings, 'MAX_UPLOAD_SIZE_MB', 0)

        response = client.post(
            '/api/files/upload',
            files={'file': ('leads.csv', b'Name\nAlice\n', 'text/csv')}
        )

        assert response.status_code == 400
        assert response.json()['error'] == "File too large"

    def test_list_files(self, client, upload):
        first = upload(name='first.xlsx')
        second = upload(name='second.xlsx')

        response = client.get('/api/files', params={'page': '1', 'limit': 'abc'})

        assert response.status_code == 200
        body = response.json()
        assert body['success'] is True
        ids = [f['id'] for f in body['data']['files']]
        assert set(ids) == {first['file']['id'], second['file']['id']}

        item = body['data']['files'][0]
        assert item['headers'] == ['Index', 'Name', 'Phone']
        assert len(item['rows']) == 25
        assert item['sizeFormatted'].endswith(('Bytes', 'KB'))

        pagination = body['data']['pagination']
        assert pagination['currentPage'] == 1
        assert pagination['filesPerPage'] == 10
        assert pagination['totalFiles'] == 2
        assert pagination['totalPages'] == 1
        assert pagination['hasNextPage'] is False
        assert pagination['hasPrevPage'] is False

    def test_huge_page_number(self, client, upload):
        upload()

        response = client.get('/api/files', params={'page': '99999999999999999999'})

        assert response.status_code == 200
        body = response.json()['data']
        assert body['files'] == []
        assert body['pagination']['totalFiles'] == 1
        assert body['pagination']['hasNextPage'] is False

    def test_get_file(self, client, upload):
        file_id = upload()['file']['id']

        response = client.get(f'/api/files/{file_id}')

        assert response.status_code == 200
        data = response.json()['data']
        assert data['id'] == file_id
        assert data['fileExists'] is True
        assert data['totalRows'] == 25

    def test_get_file_errors(self, client):
        assert client.get('/api/files/not-an-id').status_code == 400

        response = client.get(f'/api/files/{uuid.uuid4()}')
        assert response.status_code == 404
        assert response.json()['error'] == "File not found"

    def test_rows_page(self, client, upload):
        file_id = upload()['file']['id']

        response = client.get(f'/api/files/excel/{file_id}', params={'page': 2, 'limit': 10})

        assert response.status_code == 200
        data = response.json()['data']
        assert [row['Index'] for row in data['rows']] == list(range(11, 21))
        assert data['fileInfo']['originalName'] == 'leads.xlsx'
        assert data['sheetInfo'] == {'headers': ['Index', 'Name', 'Phone'], 'totalRows': 25}
        assert data['pagination'] == {
            'currentPage': 2,
            'totalPages': 3,
            'totalRows': 25,
            'rowsPerPage': 10,
            'hasNextPage': True,
            'hasPrevPage': True,
            'startRow': 11,
            'endRow': 20,
        }

    def test_rows_for_file_without_data(self, client):
        response = client.post(
            '/api/files/upload',
            files={'file': ('empty.csv', b'Name,Phone\n', 'text/csv')}
        )
        file_id = response.json()['file']['id']

        response = client.get(f'/api/files/excel/{file_id}')

        assert response.status_code == 400
        assert response.json()['error'] == "No Excel data found for this file"

    def test_download(self, client, upload):
        file_id = upload()['file']['id']
        storage_path = client.get(f'/api/files/{file_id}').json()['data']['storagePath']

        response = client.get(f'/api/files/download/{file_id}')

        assert response.status_code == 200
        assert 'leads.xlsx' in response.headers['content-disposition']
        with open(storage_path, 'rb') as f:
            assert response.content == f.read()

    def test_update(self, client, upload):
        file_id = upload()['file']['id']

        response = client.put(
            f'/api/files/{file_id}',
            files={'file': ('fresh.csv', b'Name,City\nAlice,Pune\n', 'text/csv')}
        )

        assert response.status_code == 200
        body = response.json()
        assert body['message'] == "File updated successfully"
        assert body['file']['originalName'] == 'fresh.csv'
        assert body['file']['totalRows'] == 1

    def test_update_with_broken_spreadsheet(self, client, upload):
        file_id = upload()['file']['id']

        response = client.put(
            f'/api/files/{file_id}',
            files={'file': ('broken.xlsx', b'garbage', XLSX_MIME)}
        )

        assert response.status_code == 400
        assert client.get(f'/api/files/{file_id}').json()['data']['totalRows'] == 25

    def test_delete(self, client, upload):
        file_id = upload()['file']['id']

        response = client.delete(f'/api/files/{file_id}', headers={'X-User-Id': 'agent-7'})

        assert response.status_code == 200
        body = response.json()
        assert body['success'] is True
        assert body['id'] == file_id
        assert body['deletedBy'] == 'agent-7'
        assert body['deletedAt']

        assert client.get(f'/api/files/{file_id}').status_code == 404
        assert client.delete(f'/api/files/{file_id}').status_code == 404
        assert client.get('/api/files').json()['data']['files'] == []


class TestCallEndpoints:

    def test_start_and_end(self, client):
        response = client.post('/api/calls/start', json={})

        assert response.status_code == 201
        call_id = response.json()['callId']
        assert response.json()['startCallTime']

        response = client.post('/api/calls/end', json={'callId': call_id, 'feedbackMessage': 'Busy'})

        assert response.status_code == 200
        assert response.json()['duration'] >= 0
        assert response.json()['endCallTime']

        response = client.post('/api/calls/end', json={'callId': call_id})
        assert response.status_code == 400
        assert response.json()['error'] == "Call not found or already ended"

    def test_start_without_body(self, client):
        assert client.post('/api/calls/start').status_code == 201

    def test_end_unknown_call(self, client):
        response = client.post('/api/calls/end', json={'callId': str(uuid.uuid4())})
        assert response.status_code == 400

    def test_get_all(self, client):
        file_id = str(uuid.uuid4())
        client.post('/api/calls/start', json={'fileId': file_id})

        response = client.get('/api/calls/getAll')

        assert response.status_code == 200
        calls = response.json()
        assert len(calls) == 1
        assert calls[0]['fileId'] == file_id
        assert calls[0]['endCallTime'] is None
        assert calls[0]['duration'] == 0

    def test_chart(self, client):
        response = client.get('/api/calls/getChart')

        assert response.status_code == 200
        body = response.json()
        assert body['totalCalls'] == 0
        assert body['changePercent'] == 0
        assert body['perDay'] == 0
        assert [d['day'] for d in body['dailyCounts']] == ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']
        assert body['timezone'] == 'Asia/Kolkata'


class TestFeedbackEndpoints:

    def test_create(self, client, upload):
        file_id = upload()['file']['id']

        response = client.post(f'/api/feedback/{file_id}', json={
            'startCallTime': '2025-01-20T10:00:00Z',
            'endCallTime': '2025-01-20T10:05:30Z',
            'feedbackMessage': 'Interested, send pricing',
        })

        assert response.status_code == 201
        body = response.json()
        assert body['success'] is True
        assert body['feedback']['fileName'] == 'leads.xlsx'
        assert body['feedback']['duration'] == 330
        assert body['feedback']['formattedDuration'] == '5m 30s'

    def test_missing_fields(self, client, upload):
        file_id = upload()['file']['id']

        response = client.post(f'/api/feedback/{file_id}', json={'feedbackMessage': 'x'})

        assert response.status_code == 400
        assert response.json()['error'].startswith("All fields are required")

    def test_unknown_file(self, client):
        response = client.post(f'/api/feedback/{uuid.uuid4()}', json={
            'startCallTime': '2025-01-20T10:00:00Z',
            'endCallTime': '2025-01-20T10:05:30Z',
            'feedbackMessage': 'x',
        })

        assert response.status_code == 404

    def test_end_before_start(self, client, upload):
        file_id = upload()['file']['id']

        response = client.post(f'/api/feedback/{file_id}', json={
            'startCallTime': '2025-01-20T10:05:30Z',
            'endCallTime': '2025-01-20T10:00:00Z',
            'feedbackMessage': 'x',
        })

        assert response.status_code == 400


class TestRouteHandlers:
    """Blocking work (parsing, disk and database I/O) must stay off the event loop."""

    @pytest.mark.parametrize('router', [files.router, calls.router, feedback.router])
    def test_handlers_run_in_threadpool(self, router):
        for route in router.routes:
            assert not inspect.iscoroutinefunction(route.endpoint), route.path
