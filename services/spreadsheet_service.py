"""
Spreadsheet Ingestion Service - Convert uploaded tabular files into rows.

Only the first sheet is read. The first non-blank row supplies the column
headers and every following non-blank row becomes a mapping of
header -> cell value. Headers are not returned separately; callers derive
them from the keys of the first row.
"""

import csv
import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import openpyxl
import xlrd

from services.exceptions import SpreadsheetParseError

logger = logging.getLogger(__name__)

EXCEL_MIME_TYPES = (
    'application/vnd.ms-excel',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'application/vnd.ms-excel.sheet.macroEnabled.12',
    'application/vnd.ms-excel.sheet.binary.macroEnabled.12',
)
SPREADSHEET_EXTENSIONS = ('.xlsx', '.xls', '.csv')

Row = Dict[str, Any]


def _normalize_value(value: Any) -> Any:
    """Map a raw cell value to a JSON-storable string, number or ''."""
    if value is None:
        return ''
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


def _is_blank(values: Sequence[Any]) -> bool:
    return all(v is None or v == '' for v in values)


def rows_to_records(raw_rows: Iterable[Sequence[Any]]) -> List[Row]:
    """
    Build row mappings from raw sheet rows.

    Blank rows are skipped. Rows are padded to the widest row so every
    mapping carries the same keys; empty header cells are named
    ``Column_<1-based index>``.
    """
    rows = [list(r) for r in raw_rows if r is not None and not _is_blank(r)]
    if not rows:
        return []

    width = max(len(r) for r in rows)
    header_row = rows[0] + [None] * (width - len(rows[0]))

    headers = []
    for col_idx, header in enumerate(header_row):
        header = _normalize_value(header)
        headers.append(str(header) if header != '' else f"Column_{col_idx + 1}")

    records = []
    for row in rows[1:]:
        record = {}
        for col_idx, header in enumerate(headers):
            value = row[col_idx] if col_idx < len(row) else None
            record[header] = _normalize_value(value)
        records.append(record)

    return records


class SpreadsheetIngestor:
    """Detects spreadsheet uploads and parses their first sheet."""

    def __init__(self, excel_mime_types: Sequence[str] = EXCEL_MIME_TYPES,
                 extensions: Sequence[str] = SPREADSHEET_EXTENSIONS):
        self.excel_mime_types = set(excel_mime_types)
        self.extensions = {e.lower() for e in extensions}

    def is_spreadsheet(self, filename: Optional[str], mime_type: Optional[str]) -> bool:
        """Check the declared MIME type or the filename extension."""
        if mime_type and mime_type in self.excel_mime_types:
            return True
        if filename and Path(filename).suffix.lower() in self.extensions:
            return True
        return False

    def parse(self, file_path: str, filename: Optional[str] = None) -> List[Row]:
        """
        Parse the first sheet of a spreadsheet file.

        Args:
            file_path: Path to the stored file
            filename: Original filename, used to pick the reader
                      (defaults to ``file_path``)

        Returns:
            Ordered list of row mappings (possibly empty)

        Raises:
            SpreadsheetParseError: If the file cannot be read
        """
        ext = Path(filename or file_path).suffix.lower()
        logger.info(f"Parsing spreadsheet: {file_path} ({ext or 'no extension'})")

        try:
            if ext == '.csv':
                raw_rows = self._read_csv(file_path)
            elif ext == '.xls':
                raw_rows = self._read_xls(file_path)
            else:
                raw_rows = self._read_xlsx(file_path)
        except Exception as e:
            raise SpreadsheetParseError(
                "Failed to parse Excel file",
                detail={'reason': str(e)}
            ) from e

        records = rows_to_records(raw_rows)
        logger.info(f"Parsed {len(records)} rows from {file_path}")
        return records

    def ingest(self, file_path: str, filename: Optional[str], mime_type: Optional[str],
               strict: bool = False) -> List[Row]:
        """
        Parse an upload if it is a recognized spreadsheet.

        Non-spreadsheets yield no rows. A parse failure is re-raised when
        ``strict`` is set, otherwise it is logged and treated as no rows.
        """
        if not self.is_spreadsheet(filename, mime_type):
            logger.info(f"Not a spreadsheet, storing without rows: {filename} ({mime_type})")
            return []

        try:
            return self.parse(file_path, filename)
        except SpreadsheetParseError as e:
            if strict:
                raise
            logger.warning(f"Spreadsheet parsing failed for {filename}, continuing without rows: "
                           f"{e.detail}")
            return []

    def _read_xlsx(self, file_path: str) -> List[tuple]:
        wb = openpyxl.load_workbook(file_path, read_only=True, data_only=True)
        try:
            if not wb.worksheets:
                return []
            worksheet = wb.worksheets[0]
            return list(worksheet.iter_rows(values_only=True))
        finally:
            wb.close()

    def _read_xls(self, file_path: str) -> List[list]:
        book = xlrd.open_workbook(file_path)
        if book.nsheets == 0:
            return []
        sheet = book.sheet_by_index(0)

        raw_rows = []
        for row_idx in range(sheet.nrows):
            values = []
            for cell in sheet.row(row_idx):
                if cell.ctype == xlrd.XL_CELL_DATE:
                    values.append(xlrd.xldate_as_datetime(cell.value, book.datemode))
                elif cell.ctype == xlrd.XL_CELL_NUMBER and float(cell.value).is_integer():
                    values.append(int(cell.value))
                elif cell.ctype == xlrd.XL_CELL_BOOLEAN:
                    values.append(bool(cell.value))
                elif cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
                    values.append(None)
                else:
                    values.append(cell.value)
            raw_rows.append(values)
        return raw_rows

    def _read_csv(self, file_path: str) -> List[list]:
        with open(file_path, newline='', encoding='utf-8-sig') as f:
            return [[self._coerce_csv_value(v) for v in row] for row in csv.reader(f)]

    @staticmethod
    def _coerce_csv_value(value: str) -> Any:
        """
        Turn numeric CSV text into numbers; keep everything else as text.

        Text with digit separators such as ``1_000`` stays text.
        """
        text = value.strip()
        if text == '' or '_' in text:
            return value
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return value
        # Keep 'nan'/'inf' style words as text
        if number != number or number in (float('inf'), float('-inf')):
            return value
        return number
