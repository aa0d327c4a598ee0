"""
Uploaded Files

Provenance records for imports: each pending recipe points at the PDF (or
URL reference) it was parsed from.
"""

from sqlalchemy import insert, select, update

from models import UploadedFile, UploadedFileView, unix_now

from .errors import ValidationError

files_table = UploadedFile.__table__


def insert_file(tx, filename, original_name, file_path, file_size, mime_type, uploaded_by):
    result = tx.execute(
        insert(files_table),
        {
            'filename': filename,
            'original_name': original_name,
            'file_path': file_path,
            'file_size': file_size or 0,
            'mime_type': mime_type,
            'uploaded_by': uploaded_by,
            'uploaded_at': unix_now(),
            'processed': False,
        },
    )
    return result.generated_id


def create_file(store, filename, original_name, file_path, file_size, mime_type, uploaded_by):
    """Record an uploaded file. Returns its id."""
    if not filename or not file_path or not mime_type:
        raise ValidationError("File name, path and MIME type are required")
    if uploaded_by is None:
        raise ValidationError("Uploader is required")

    return store.with_transaction(
        lambda tx: insert_file(
            tx, filename, original_name or filename, file_path,
            file_size, mime_type, uploaded_by,
        )
    )


def get_file(store, file_id):
    row = store.fetch_one(select(files_table).where(files_table.c.id == file_id))
    return UploadedFileView.from_row(row) if row else None


def list_files_by_user(store, user_id):
    """Files a user uploaded, newest first."""
    rows = store.fetch_all(
        select(files_table)
        .where(files_table.c.uploaded_by == user_id)
        .order_by(files_table.c.uploaded_at.desc(), files_table.c.id.desc())
    )
    return [UploadedFileView.from_row(row) for row in rows]


def set_processed(runner, file_id):
    """Flag a file as parsed through runner (store or transaction)."""
    return runner.execute(
        update(files_table).where(files_table.c.id == file_id).values(processed=True)
    )


def mark_processed(store, file_id):
    """Flag a file as parsed. Returns False if the file does not exist."""
    return set_processed(store, file_id).rows_affected > 0


def list_unprocessed(store):
    """Files not yet parsed, oldest first."""
    rows = store.fetch_all(
        select(files_table)
        .where(files_table.c.processed.is_(False))
        .order_by(files_table.c.uploaded_at.asc(), files_table.c.id.asc())
    )
    return [UploadedFileView.from_row(row) for row in rows]
