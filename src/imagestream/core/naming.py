"""File names for binary payloads.

Names look like ``image_20260101_120000_<uuid4><ext>``. The timestamp is local
wall-clock time at second precision; the random uuid keeps names unique when
several payloads arrive within the same second.
"""
import mimetypes
import uuid
from datetime import datetime
from typing import Optional

from .parts import DEFAULT_MIME_TYPE

TIMESTAMP_FORMAT = '%Y%m%d_%H%M%S'


def resolve_extension(mime_type: Optional[str]) -> str:
    """Return the registry extension for ``mime_type`` or '' when unknown."""
    if not mime_type:
        return ''
    try:
        ext = mimetypes.guess_extension(mime_type.strip(), strict=False)
    except (AttributeError, TypeError, ValueError):
        return ''
    return ext or ''


def make_file_name(mime_type: Optional[str] = DEFAULT_MIME_TYPE, prefix: str = 'image_',
                   now: Optional[datetime] = None, uid: Optional[uuid.UUID] = None) -> str:
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    uid = uid or uuid.uuid4()
    return f'{prefix}{stamp}_{uid}{resolve_extension(mime_type)}'
