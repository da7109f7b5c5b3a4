#!/usr/bin/env python3
"""
Callsheet admin CLI

Works directly against the database and upload directory configured in
the environment (.env is loaded).

Usage:
    # Show what the ingestor extracts from a spreadsheet
    python scripts/callsheet_cli.py preview --file leads.xlsx

    # List files, including soft-deleted ones
    python scripts/callsheet_cli.py files --include-deleted

    # Undo a soft delete
    python scripts/callsheet_cli.py restore <file-id>

    # Weekly call chart
    python scripts/callsheet_cli.py chart
"""

import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import json
import logging

import click
from dotenv import load_dotenv

from services.exceptions import ServiceError
from services.spreadsheet_service import SpreadsheetIngestor

# Load environment variables
load_dotenv()

# Configure logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'WARNING')

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stderr)]
)

logger = logging.getLogger('callsheet_cli')


def _session():
    from api.dependencies import SessionLocal
    return SessionLocal()


@click.group()
def cli():
    """Callsheet administration commands"""


@cli.command()
@click.option('--file', 'file_path', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Spreadsheet to parse')
@click.option('--rows', 'show_rows', default=5, show_default=True, help='Number of rows to print')
def preview(file_path, show_rows):
    """Parse a spreadsheet and print its headers and first rows."""
    ingestor = SpreadsheetIngestor()

    try:
        rows = ingestor.parse(file_path)
    except ServiceError as e:
        click.echo(f"❌ {e.message}: {(e.detail or {}).get('reason', '')}", err=True)
        sys.exit(1)

    headers = list(rows[0].keys()) if rows else []
    click.echo(f"Headers: {', '.join(headers) if headers else '(none)'}")
    click.echo(f"Rows: {len(rows)}")

    for row in rows[:show_rows]:
        click.echo(json.dumps(row, default=str))


@cli.command()
@click.option('--include-deleted', is_flag=True, help='Also list soft-deleted files')
def files(include_deleted):
    """List stored files, newest first."""
    from backend.models.schema import FileRecord

    with _session() as session:
        query = session.query(FileRecord)
        if not include_deleted:
            query = query.filter(FileRecord.is_deleted.is_(False))

        records = query.order_by(FileRecord.upload_date.desc()).all()

        if not records:
            click.echo("No files found")
            return

        for record in records:
            marker = ' [deleted]' if record.is_deleted else ''
            click.echo(f"{record.id}  {record.upload_date:%Y-%m-%d %H:%M}  "
                       f"{record.total_rows:>6} rows  {record.original_name}{marker}")


@cli.command()
@click.argument('file_id')
def restore(file_id):
    """Clear the soft delete marker of a file."""
    from api.dependencies import get_storage
    from services.file_service import FileService

    with _session() as session:
        service = FileService(db_session=session, storage=get_storage())
        try:
            record = service.restore(file_id)
        except ServiceError as e:
            click.echo(f"❌ {e.message}", err=True)
            sys.exit(1)

        click.echo(f"✅ Restored {record.id} ({record.original_name})")


@cli.command()
def chart():
    """Print this week's call chart."""
    from api.config import settings
    from services.call_service import CallService

    with _session() as session:
        service = CallService(
            db_session=session,
            report_timezone=settings.REPORT_TIMEZONE,
            min_duration_seconds=settings.CHART_MIN_DURATION_SECONDS
        )
        data = service.weekly_chart()

    click.echo(f"Week of {data['week_start']:%Y-%m-%d} ({data['timezone']})")
    for entry in data['daily_counts']:
        click.echo(f"  {entry['day']}: {entry['count']}")
    click.echo(f"Total: {data['total_calls']}  Per day: {data['per_day']}  "
               f"Change: {data['change_percent']}%")


if __name__ == '__main__':
    cli()
