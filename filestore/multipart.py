# filestore/multipart.py
"""
multipart/form-data encoding for uploads.

The body is assembled fully in memory, once per call, and is shaped as::

    --<boundary>\\r\\n
    Content-Disposition: form-data; name="key"\\r\\n
    \\r\\n
    <key>\\r\\n
    --<boundary>\\r\\n
    Content-Disposition: form-data; name="file"; filename="<key>"\\r\\n
    Content-Type: <mime>\\r\\n
    \\r\\n
    <bytes>\\r\\n
    --<boundary>--
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional

from filestore.exceptions import InvalidRequest

logger = logging.getLogger("FileStore_Core").getChild("Multipart")

CRLF = b"\r\n"
MAX_BOUNDARY_ATTEMPTS = 8


def generate_boundary() -> str:
    """Fresh boundary token, e.g. ``Boundary-0F6C...``."""
    return f"Boundary-{str(uuid.uuid4()).upper()}"


@dataclass(frozen=True)
class MultipartBody:
    """An encoded multipart/form-data payload and the boundary that delimits it."""
    content: bytes
    boundary: str

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"


def _pick_boundary(payloads: List[bytes], boundary_factory: Callable[[], str]) -> str:
    """Returns a boundary that does not occur inside any of the payloads."""
    for _ in range(MAX_BOUNDARY_ATTEMPTS):
        boundary = boundary_factory()
        marker = boundary.encode("utf-8")
        if not any(marker in payload for payload in payloads):
            return boundary
        logger.debug(f"Boundary {boundary} collides with upload content, regenerating.")
    raise InvalidRequest(f"Could not find a multipart boundary absent from the content after {MAX_BOUNDARY_ATTEMPTS} attempts")


def _escape_filename(name: str) -> str:
    """Percent-escapes quote, CR and LF so the filename stays one quoted parameter."""
    return name.replace('"', "%22").replace("\r", "%0D").replace("\n", "%0A")


def encode_file_upload(
    key: str,
    data: bytes,
    content_type: str = "",
    boundary_factory: Optional[Callable[[], str]] = None,
) -> MultipartBody:
    """Builds the two-part upload body: a ``key`` text field and a ``file`` part named after the key."""
    key_bytes = key.encode("utf-8")
    filename_bytes = _escape_filename(key).encode("utf-8")
    boundary = _pick_boundary([key_bytes, data], boundary_factory or generate_boundary)
    opener = f"--{boundary}".encode("utf-8")

    parts: List[bytes] = [
        # Text part
        opener + CRLF,
        b'Content-Disposition: form-data; name="key"' + CRLF,
        CRLF,
        key_bytes + CRLF,
        # File part
        opener + CRLF,
        b'Content-Disposition: form-data; name="file"; filename="' + filename_bytes + b'"' + CRLF,
        f"Content-Type: {content_type}".encode("utf-8") + CRLF,
        CRLF,
        data + CRLF,
        # Terminator
        opener + b"--",
    ]
    return MultipartBody(content=b"".join(parts), boundary=boundary)
