"""
Tests for spreadsheet ingestion.

Covers header derivation, synthesized column names, blank row handling,
CSV input and the strict/tolerant failure policies.
"""

from datetime import datetime

import pytest

from services.exceptions import SpreadsheetParseError
from services.spreadsheet_service import SpreadsheetIngestor, rows_to_records


class TestRowsToRecords:
    """Test row mapping construction from raw sheet rows."""

    def test_headers_and_values(self):
        records = rows_to_records([
            ['Name', 'Phone'],
            ['Alice', 5551234],
            ['Bob', 5555678],
        ])

        assert records == [
            {'Name': 'Alice', 'Phone': 5551234},
            {'Name': 'Bob', 'Phone': 5555678},
        ]

    def test_empty_header_gets_synthesized_name(self):
        records = rows_to_records([
            ['Name', None, ''],
            ['Alice', 'x', 'y'],
        ])

        assert list(records[0].keys()) == ['Name', 'Column_2', 'Column_3']

    def test_blank_rows_skipped_and_first_non_blank_is_header(self):
        records = rows_to_records([
            [None, None],
            ['Name', 'City'],
            ['', None],
            ['Alice', 'Pune'],
        ])

        assert records == [{'Name': 'Alice', 'City': 'Pune'}]

    def test_missing_cells_become_empty_string(self):
        records = rows_to_records([
            ['Name', 'City', 'Phone'],
            ['Alice'],
            ['Bob', None, 42],
        ])

        assert records[0] == {'Name': 'Alice', 'City': '', 'Phone': ''}
        assert records[1] == {'Name': 'Bob', 'City': '', 'Phone': 42}

    def test_zero_is_kept(self):
        records = rows_to_records([['Count'], [0]])
        assert records == [{'Count': 0}]

    def test_wider_data_row_pads_headers(self):
        records = rows_to_records([
            ['Name'],
            ['Alice', 'extra'],
        ])

        assert records == [{'Name': 'Alice', 'Column_2': 'extra'}]

    def test_header_only(self):
        assert rows_to_records([['Name', 'Phone']]) == []

    def test_no_rows(self):
        assert rows_to_records([]) == []

    def test_dates_are_iso_strings(self):
        records = rows_to_records([['When'], [datetime(2025, 1, 20, 10, 0)]])
        assert records == [{'When': '2025-01-20T10:00:00'}]


class TestSpreadsheetIngestor:
    """Test file-level parsing."""

    def test_xlsx_first_sheet_only(self, ingestor, make_xlsx):
        path = make_xlsx(
            [['Name', None, 'Phone'], ['Alice', 'VIP', 5551234], [None, None, None], ['Bob']],
            extra_sheet_rows=[['Ignored'], ['value']]
        )

        records = ingestor.parse(path)

        assert records == [
            {'Name': 'Alice', 'Column_2': 'VIP', 'Phone': 5551234},
            {'Name': 'Bob', 'Column_2': '', 'Phone': ''},
        ]

    def test_row_count_matches_data_rows(self, ingestor, make_xlsx, lead_rows):
        records = ingestor.parse(make_xlsx(lead_rows))

        assert len(records) == 25
        assert all(list(r.keys()) == ['Index', 'Name', 'Phone'] for r in records)

    def test_csv(self, ingestor, make_file):
        path = make_file('leads.csv', "Name,,Phone\nAlice,x,5551234\n\nBob,,\nCarol,y,12.5\n")

        records = ingestor.parse(path)

        assert records == [
            {'Name': 'Alice', 'Column_2': 'x', 'Phone': 5551234},
            {'Name': 'Bob', 'Column_2': '', 'Phone': ''},
            {'Name': 'Carol', 'Column_2': 'y', 'Phone': 12.5},
        ]

    def test_csv_digit_separators_stay_text(self, ingestor, make_file):
        path = make_file('ids.csv', "Code,Amount\n1_000,2_5.0\n")
        assert ingestor.parse(path) == [{'Code': '1_000', 'Amount': '2_5.0'}]

    def test_csv_with_bom(self, ingestor, make_file):
        path = make_file('bom.csv', b'\xef\xbb\xbfName\nAlice\n')
        assert ingestor.parse(path) == [{'Name': 'Alice'}]

    def test_corrupt_xlsx_raises(self, ingestor, make_file):
        path = make_file('broken.xlsx', b'this is not a zip archive')

        with pytest.raises(SpreadsheetParseError):
            ingestor.parse(path)

    def test_corrupt_xls_raises(self, ingestor, make_file):
        path = make_file('broken.xls', b'\x00\x01garbage')

        with pytest.raises(SpreadsheetParseError):
            ingestor.parse(path)

    def test_filename_selects_reader(self, ingestor, make_file):
        # Stored under a neutral name, original name says CSV
        path = make_file('upload.bin', "A,B\n1,2\n")
        assert ingestor.parse(path, filename='report.csv') == [{'A': 1, 'B': 2}]


class TestIngestPolicy:
    """Test recognition and the strict/tolerant failure policies."""

    @pytest.mark.parametrize('filename,mime,expected', [
        ('a.xlsx', None, True),
        ('a.XLS', None, True),
        ('a.csv', 'text/csv', True),
        ('a.bin', 'application/vnd.ms-excel', True),
        ('a.txt', 'text/plain', False),
        (None, None, False),
    ])
    def test_is_spreadsheet(self, ingestor, filename, mime, expected):
        assert ingestor.is_spreadsheet(filename, mime) is expected

    def test_non_spreadsheet_yields_no_rows(self, ingestor, make_file):
        path = make_file('notes.txt', 'hello')
        assert ingestor.ingest(path, 'notes.txt', 'text/plain') == []

    def test_tolerant_failure_yields_no_rows(self, ingestor, make_file):
        path = make_file('broken.xlsx', b'nope')
        assert ingestor.ingest(path, 'broken.xlsx', None, strict=False) == []

    def test_strict_failure_raises(self, ingestor, make_file):
        path = make_file('broken.xlsx', b'nope')

        with pytest.raises(SpreadsheetParseError):
            ingestor.ingest(path, 'broken.xlsx', None, strict=True)

    def test_custom_extensions(self, make_file):
        ingestor = SpreadsheetIngestor(excel_mime_types=(), extensions=('.csv',))
        assert ingestor.is_spreadsheet('a.xlsx', None) is False
        assert ingestor.is_spreadsheet('a.csv', None) is True
