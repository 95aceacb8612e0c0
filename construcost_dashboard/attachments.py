"""Turning uploaded files into :class:`AttachedFile` records.

Uploads arrive as Streamlit ``UploadedFile`` objects (``name``, ``type`` and
``getvalue()``); anything exposing the same attributes works, which keeps the
helpers usable from tests and scripts.
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
import secrets
from pathlib import PurePath
from typing import Any, Optional, Tuple

from .models import AttachedFile

_SPREADSHEET_EXTENSIONS = {'.xls', '.xlsx', '.xlsm', '.ods', '.csv'}
_SPREADSHEET_MIME_MARKERS = ('spreadsheet', 'excel', 'csv')

# (signature, mime type)
_MAGIC_NUMBERS = (
    (b'%PDF', 'application/pdf'),
    (b'\x89PNG\r\n\x1a\n', 'image/png'),
    (b'\xff\xd8\xff', 'image/jpeg'),
    (b'GIF87a', 'image/gif'),
    (b'GIF89a', 'image/gif'),
)


def new_file_id() -> str:
    return secrets.token_hex(5)


def read_upload(upload: Any) -> Tuple[str, bytes, str]:
    """Return ``(name, content, declared_mime)`` for an uploaded file."""
    name = str(getattr(upload, 'name', '') or 'arquivo')
    if hasattr(upload, 'getvalue'):
        content = upload.getvalue()
    else:
        content = upload.read()
    declared = getattr(upload, 'type', None) or getattr(upload, 'mime_type', None) or ''
    return name, bytes(content), str(declared)


def sniff_mime(name: str, content: bytes, declared: str = '') -> str:
    """Best-effort MIME type: magic bytes first, then declared, then extension."""
    for signature, mime in _MAGIC_NUMBERS:
        if content.startswith(signature):
            return mime
    if content[:4] == b'RIFF' and content[8:12] == b'WEBP':
        return 'image/webp'
    if declared:
        return declared
    guessed, _ = mimetypes.guess_type(name)
    return guessed or 'application/octet-stream'


def classify_file(name: str, mime: str) -> str:
    """Map a filename and MIME type onto the attachment type vocabulary."""
    mime = (mime or '').lower()
    suffix = PurePath(name).suffix.lower()
    if 'image' in mime:
        return 'image'
    if 'pdf' in mime or suffix == '.pdf':
        return 'pdf'
    if suffix in _SPREADSHEET_EXTENSIONS or any(m in mime for m in _SPREADSHEET_MIME_MARKERS):
        return 'spreadsheet'
    return 'other'


def to_data_uri(content: bytes, mime: str) -> str:
    encoded = base64.b64encode(content).decode('ascii')
    return f"data:{mime};base64,{encoded}"


def split_data_uri(url: str) -> Optional[Tuple[str, str]]:
    """Return ``(mime, base64_payload)`` for a data URI, ``None`` otherwise."""
    if not url.startswith('data:') or ',' not in url:
        return None
    header, payload = url.split(',', 1)
    mime = header[len('data:'):].split(';', 1)[0] or 'application/octet-stream'
    return mime, payload


def decode_data_uri(url: str) -> Optional[bytes]:
    parts = split_data_uri(url)
    if parts is None:
        return None
    try:
        return base64.b64decode(parts[1])
    except (binascii.Error, ValueError):
        return None


def attach_upload(upload: Any) -> AttachedFile:
    """Read an upload completely and build the attachment record."""
    name, content, declared = read_upload(upload)
    mime = sniff_mime(name, content, declared)
    return AttachedFile(
        id=new_file_id(),
        name=name,
        url=to_data_uri(content, mime),
        type=classify_file(name, mime),
    )


def mime_for_attachment(attachment: AttachedFile) -> str:
    """MIME type to send to the extraction service for a stored attachment."""
    parts = split_data_uri(attachment.url)
    if parts is not None and parts[0] != 'application/octet-stream':
        return parts[0]
    if attachment.type == 'pdf':
        return 'application/pdf'
    if attachment.type == 'image':
        return 'image/png'
    return 'application/octet-stream'
