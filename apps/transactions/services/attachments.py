"""
Attachment storage for transactions and payments.

Files are written through Django's default storage under
``<folder>/<transaction_id>/<timestamp>_<name>`` and described on the row
by a small JSON record. Validation failures are the caller's input error;
storage failures are logged and skipped by the best-effort helpers.
"""

import logging
import mimetypes
import os
import time

from django.conf import settings
from django.core.files.storage import default_storage
from django.utils import timezone
from django.utils.text import get_valid_filename

from .exceptions import TransactionValidationError, ExternalServiceError

logger = logging.getLogger(__name__)

PAYMENT_FOLDER = 'payment-attachments'
TRANSACTION_FOLDER = 'transaction-attachments'


def _content_type(file) -> str:
    content_type = getattr(file, 'content_type', None)
    if not content_type:
        content_type, _ = mimetypes.guess_type(getattr(file, 'name', '') or '')
    return content_type or 'application/octet-stream'


def validate_attachment(file, max_size: int) -> None:
    """
    Check type and size of an uploaded file.

    Raises:
        TransactionValidationError: If the type isn't JPEG/PNG/PDF or the
            file is larger than max_size bytes
    """
    allowed = settings.ATTACHMENT_ALLOWED_TYPES
    if _content_type(file) not in allowed:
        raise TransactionValidationError(
            f"File type not allowed for {file.name}. Only JPG, PNG and PDF files are accepted",
            field='attachments',
        )
    if file.size > max_size:
        raise TransactionValidationError(
            f"{file.name} exceeds the {max_size // (1024 * 1024)}MB limit",
            field='attachments',
        )


def _storage_path(folder: str, transaction_id, file_name: str) -> str:
    return f"{folder}/{transaction_id}/{file_name}"


def store_attachment(file, transaction_id, folder: str) -> dict:
    """
    Write one file to storage and return its attachment record.

    Raises:
        ExternalServiceError: If the storage backend fails
    """
    base_name = get_valid_filename(os.path.basename(file.name or 'file'))
    file_name = f"{int(time.time() * 1000)}_{base_name}"
    try:
        saved = default_storage.save(_storage_path(folder, transaction_id, file_name), file)
        url = default_storage.url(saved)
    except Exception as exc:
        raise ExternalServiceError(f"Could not store {base_name}: {exc}") from exc

    return {
        'file_name': os.path.basename(saved),
        'file_url': url,
        'file_type': _content_type(file),
        'file_size': file.size,
        'uploaded_at': timezone.now().isoformat(),
    }


def store_attachments(files, transaction_id, folder: str) -> list:
    """
    Store several files, skipping the ones storage rejects.

    Returns the records of the files that were stored.
    """
    records = []
    for file in files or []:
        try:
            records.append(store_attachment(file, transaction_id, folder))
        except ExternalServiceError as exc:
            logger.warning(
                "Attachment upload skipped for transaction %s: %s",
                transaction_id, exc
            )
    return records


def delete_attachment(record: dict, transaction_id, folder: str) -> None:
    """
    Remove a stored file. A file that is already gone is not an error.

    Raises:
        ExternalServiceError: If the storage backend fails
    """
    path = _storage_path(folder, transaction_id, record.get('file_name', ''))
    try:
        if default_storage.exists(path):
            default_storage.delete(path)
    except Exception as exc:
        raise ExternalServiceError(f"Could not delete {path}: {exc}") from exc


def delete_attachments(records, transaction_id, folder: str) -> None:
    """Best-effort removal of several stored files."""
    for record in records or []:
        try:
            delete_attachment(record, transaction_id, folder)
        except ExternalServiceError as exc:
            logger.warning("Attachment cleanup failed: %s", exc)
