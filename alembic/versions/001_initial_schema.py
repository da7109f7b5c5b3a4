"""Initial schema for files, calls and feedback

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-10-14

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create files table
    op.create_table(
        'files',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=False,
                  comment='Filename as uploaded by the client'),
        sa.Column('stored_name', sa.String(length=255), nullable=False,
                  comment='Generated filename inside the upload directory'),
        sa.Column('mime_type', sa.String(length=255), nullable=True, comment='Declared MIME type'),
        sa.Column('size_bytes', sa.Integer(), nullable=False, comment='File size in bytes'),
        sa.Column('storage_path', sa.String(length=512), nullable=False, comment='Path to stored file'),
        sa.Column('upload_date', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False, comment='Upload (or last replacement) timestamp'),
        sa.Column('rows', sa.JSON(), server_default='[]',
                  nullable=False, comment='Row mappings (header -> cell value) from the first sheet'),
        sa.Column('is_deleted', sa.Boolean(), server_default='false', nullable=False,
                  comment='Soft delete flag'),
        sa.Column('deleted_at', sa.TIMESTAMP(), nullable=True, comment='Soft delete timestamp'),
        sa.Column('deleted_by', sa.String(length=255), nullable=True,
                  comment='User that soft deleted the file'),
        sa.PrimaryKeyConstraint('id'),
        comment='Uploaded files with parsed spreadsheet rows'
    )

    op.create_index('idx_files_upload_date', 'files', ['upload_date'])
    op.create_index('idx_files_is_deleted', 'files', ['is_deleted'])

    # Create calls table
    op.create_table(
        'calls',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('file_id', sa.String(length=36), nullable=True,
                  comment='Related file (non-owning reference)'),
        sa.Column('start_call_time', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False),
        sa.Column('end_call_time', sa.TIMESTAMP(), nullable=True, comment='Set once when the call ends'),
        sa.Column('duration', sa.Integer(), server_default='0', nullable=False,
                  comment='Whole seconds between start and end'),
        sa.Column('feedback_message', sa.Text(), server_default='', nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False),
        sa.PrimaryKeyConstraint('id'),
        comment='Call sessions with duration and feedback'
    )

    op.create_index('idx_calls_created_at', 'calls', ['created_at'])
    op.create_index('idx_calls_file_id', 'calls', ['file_id'])

    # Create feedback table
    op.create_table(
        'feedback',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('file_id', sa.String(length=36), nullable=False,
                  comment='Related file (non-owning reference)'),
        sa.Column('start_call_time', sa.TIMESTAMP(), nullable=False),
        sa.Column('end_call_time', sa.TIMESTAMP(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False, comment='Whole seconds between start and end'),
        sa.Column('feedback_message', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False),
        sa.PrimaryKeyConstraint('id'),
        comment='Call feedback entries linked to files'
    )

    op.create_index('idx_feedback_file_id', 'feedback', ['file_id'])


def downgrade() -> None:
    op.drop_index('idx_feedback_file_id', table_name='feedback')
    op.drop_table('feedback')

    op.drop_index('idx_calls_file_id', table_name='calls')
    op.drop_index('idx_calls_created_at', table_name='calls')
    op.drop_table('calls')

    op.drop_index('idx_files_is_deleted', table_name='files')
    op.drop_index('idx_files_upload_date', table_name='files')
    op.drop_table('files')
