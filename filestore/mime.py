# filestore/mime.py
"""
MIME type lookup for uploads.

The client only needs a best-effort guess keyed by file extension; anything
with a ``guess(extension)`` method can be injected instead of the default.
"""
import mimetypes
from typing import Optional, Protocol


class MimeTypeLookup(Protocol):
    def guess(self, extension: str) -> Optional[str]:
        ...


class MimetypesLookup:
    """Looks extensions up in the standard ``mimetypes`` registry."""

    def guess(self, extension: str) -> Optional[str]:
        if not extension:
            return None
        if not extension.startswith('.'):
            extension = f".{extension}"
        return mimetypes.guess_type(f"file{extension}")[0]
