from __future__ import annotations

import mimetypes
import os
from typing import Optional

from .errors import ValidationError

CSV_MIME_TYPE = "text/csv"


def upload_name(file_obj) -> str:
    """Best-effort file name for a Gradio upload, path or file object."""
    if file_obj is None:
        return ''
    if isinstance(file_obj, (str, os.PathLike)):
        return os.fspath(file_obj)
    return str(getattr(file_obj, 'orig_name', None) or getattr(file_obj, 'name', '') or '')


def validate_csv_upload(file_name: Optional[str], mime_type: Optional[str] = None) -> str:
    """Accept `text/csv` uploads or names ending in `.csv`; return the name."""
    if not file_name:
        raise ValidationError("Please select a file first.")

    if mime_type is None:
        mime_type, _ = mimetypes.guess_type(file_name)

    if mime_type == CSV_MIME_TYPE or file_name.lower().endswith('.csv'):
        return file_name
    raise ValidationError("Please upload a valid CSV file.")


def read_csv_bytes(file_obj, limit: Optional[int] = None) -> bytes:
    """Read raw bytes from an uploaded file, file path or file-like object.

    `limit` reads only a prefix (used for the header preview).
    """
    if file_obj is None:
        raise ValidationError("Please select a file first.")

    size = -1 if limit is None else max(0, int(limit))

    if hasattr(file_obj, 'read'):
        if hasattr(file_obj, 'seek'):
            file_obj.seek(0)
        content = file_obj.read(size)
        if isinstance(content, str):
            content = content.encode('utf-8')
        return content

    path = file_obj.name if hasattr(file_obj, 'name') else file_obj
    with open(path, 'rb') as f:
        return f.read(size)


def decode_csv_bytes(raw: bytes) -> str:
    """Decode as UTF-8, dropping a BOM; a prefix cut mid-character is tolerated."""
    if isinstance(raw, str):
        return raw
    return raw.decode('utf-8-sig', errors='replace')
