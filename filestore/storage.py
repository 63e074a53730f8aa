# filestore/storage.py
"""
File service client.

Wraps the remote file-storage HTTP API behind three coroutines:

- ``get_file(key)``    GET    {endpoint}/{key}  -> ``url``
- ``put_file(key, f)`` POST   {endpoint}        -> ``key`` (multipart/form-data)
- ``delete_file(key)`` DELETE {endpoint}        -> ``key`` (JSON body)

Every response goes through the same status classification before its JSON
body is read. Nothing is retried; failures surface as ``FileClientError``
subclasses.
"""
import json
import os
from typing import BinaryIO, Callable, Dict, Optional, Type, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from filestore.config import Settings, logger as core_logger, settings as default_settings
from filestore.exceptions import (
    BadServerResponse,
    ClientError,
    FileReadError,
    HTTPStatusError,
    InvalidRequest,
    ParseError,
    RedirectionError,
    ServerError,
    UnknownError,
)
from filestore.mime import MimeTypeLookup, MimetypesLookup
from filestore.models import DeleteFileRequest, FileKeyResponse, FileRecord, FileUrlResponse, validate_key
from filestore.multipart import encode_file_upload, generate_boundary
from filestore.transport import HttpxTransport, Transport, TransportResponse

logger = core_logger.getChild("FileClient")

FileSource = Union[str, "os.PathLike[str]", BinaryIO]


def classify_status(status_code: int, body: Optional[str] = None) -> None:
    """Raises the error matching the status bucket; returns quietly for 2xx."""
    if 200 <= status_code <= 299:
        return
    if 300 <= status_code <= 399:
        raise RedirectionError(status_code, body)
    if 400 <= status_code <= 499:
        raise ClientError(status_code, body)
    if 500 <= status_code <= 599:
        raise ServerError(status_code, body)
    raise UnknownError(status_code, body)


class FileClient:
    def __init__(
        self,
        base_url: str,
        endpoint_path: str = "file",
        *,
        transport: Optional[Transport] = None,
        mime_lookup: Optional[MimeTypeLookup] = None,
        debug_responses: bool = False,
        log_sink: Optional[Callable[[str], None]] = None,
        boundary_factory: Callable[[], str] = generate_boundary,
        timeout: float = default_settings.HTTP_TIMEOUT,
    ):
        path = endpoint_path.strip("/")
        self.endpoint = f"{base_url.rstrip('/')}/{path}" if path else base_url.rstrip("/")
        self._owns_transport = transport is None
        self.transport: Transport = transport or HttpxTransport(timeout=timeout)
        self.mime_lookup: MimeTypeLookup = mime_lookup or MimetypesLookup()
        self.debug_responses = debug_responses
        self.log_sink = log_sink or logger.info
        self.boundary_factory = boundary_factory

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides) -> "FileClient":
        """Builds a client from FILE_SERVICE_URL / FILE_ENDPOINT_PATH / HTTP_TIMEOUT / DEBUG_RESPONSES."""
        settings = settings or default_settings
        options = {
            "endpoint_path": settings.FILE_ENDPOINT_PATH,
            "debug_responses": settings.DEBUG_RESPONSES,
            "timeout": settings.HTTP_TIMEOUT,
        }
        options.update(overrides)
        return cls(settings.FILE_SERVICE_URL, **options)

    # --- Lifecycle ---

    async def aclose(self) -> None:
        """Closes the transport if this client created it."""
        if self._owns_transport and hasattr(self.transport, "aclose"):
            await self.transport.aclose()

    async def __aenter__(self) -> "FileClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --- Operations ---

    async def get_file(self, key: str) -> str:
        """Returns the URL the service serves ``key`` from."""
        validate_key(key)
        url = self._build_url(f"{self.endpoint}/{self._key_path(key)}")
        logger.info(f"[{key}] Fetching file URL: GET {url}")
        response = await self._send("GET", url, key=key)
        return self._extract(response, FileUrlResponse, "url", key=key)

    async def get_file_record(self, key: str) -> FileRecord:
        """Same as ``get_file`` but returns the (key, url) pair."""
        url = await self.get_file(key)
        return FileRecord(key=key, url=url)

    async def put_file(self, key: str, file: FileSource) -> str:
        """Uploads ``file`` under ``key`` as multipart/form-data; returns the key echoed by the service."""
        validate_key(key)
        data, source_name = self._read_file(file)
        extension = os.path.splitext(source_name or key)[1]
        content_type = self.mime_lookup.guess(extension) or ""

        url = self._build_url(self.endpoint)
        body = encode_file_upload(key, data, content_type, boundary_factory=self.boundary_factory)
        logger.info(f"[{key}] Uploading {len(data)} bytes ({content_type or 'unknown type'}): POST {url}")
        response = await self._send(
            "POST",
            url,
            key=key,
            headers={"Content-Type": body.content_type},
            content=body.content,
        )
        return self._extract(response, FileKeyResponse, "key", key=key)

    async def delete_file(self, key: str) -> str:
        """Deletes ``key``; returns the key echoed by the service."""
        validate_key(key)
        url = self._build_url(self.endpoint)
        payload = DeleteFileRequest(key=key).model_dump_json().encode("utf-8")
        logger.info(f"[{key}] Deleting file: DELETE {url}")
        response = await self._send(
            "DELETE",
            url,
            key=key,
            headers={"Content-Type": "application/json"},
            content=payload,
        )
        return self._extract(response, FileKeyResponse, "key", key=key)

    # --- Helpers ---

    @staticmethod
    def _key_path(key: str) -> str:
        """Percent-encodes the key for the URL path; dot-only segments are escaped so they are not resolved away."""
        segments = []
        for segment in key.split("/"):
            if segment and set(segment) == {"."}:
                segments.append("%2E" * len(segment))
            else:
                segments.append(quote(segment, safe=""))
        return "/".join(segments)

    @staticmethod
    def _build_url(raw: str) -> str:
        try:
            url = httpx.URL(raw)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise InvalidRequest(f"Invalid URL {raw!r}: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidRequest(f"Invalid URL {raw!r}: expected an absolute http(s) URL")
        return str(url)

    @staticmethod
    def _read_file(file: FileSource) -> tuple[bytes, str]:
        """Reads the whole upload into memory; returns (bytes, name used for the MIME guess)."""
        if isinstance(file, (str, os.PathLike)):
            path = os.fspath(file)
            try:
                with open(path, "rb") as f:
                    data = f.read()
            except OSError as e:
                logger.error(f"Could not read upload source {path}: {e}")
                raise FileReadError(path, str(e)) from e
            return data, path

        name = getattr(file, "name", "")
        name = name if isinstance(name, str) else ""
        try:
            data = file.read()
        except (OSError, ValueError, AttributeError) as e:
            # ValueError: closed file object; AttributeError: no read()
            logger.error(f"Could not read upload source {name or file!r}: {e}")
            raise FileReadError(name or repr(file), str(e)) from e
        if not isinstance(data, (bytes, bytearray)):
            raise FileReadError(name or repr(file), f"expected bytes, got {type(data).__name__}")
        return bytes(data), name

    async def _send(
        self,
        method: str,
        url: str,
        *,
        key: str,
        headers: Optional[Dict[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> TransportResponse:
        response = await self.transport.request(method, url, headers=headers, content=content)
        status_code = getattr(response, "status_code", None)
        body = getattr(response, "content", None)
        if not isinstance(status_code, int) or isinstance(status_code, bool) or not isinstance(body, (bytes, bytearray)):
            logger.error(f"[{key}] {method} {url} returned a non-HTTP response: {response!r}")
            raise BadServerResponse(f"{method} {url} returned a non-HTTP response")

        if self.debug_responses:
            self.log_sink(self._pretty(body))

        try:
            classify_status(status_code, body.decode("utf-8", errors="replace"))
        except HTTPStatusError as e:
            logger.warning(f"[{key}] {method} {url} failed: {e}")
            raise
        return response

    @staticmethod
    def _extract(response: TransportResponse, model: Type[BaseModel], field: str, *, key: str) -> str:
        try:
            parsed = model.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning(f"[{key}] Response body has no usable '{field}': {e.errors()[0]['msg'] if e.errors() else e}")
            raise ParseError(field, str(e)) from e
        return getattr(parsed, field)

    @staticmethod
    def _pretty(body: bytes) -> str:
        text = body.decode("utf-8", errors="replace")
        try:
            return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
        except ValueError:
            return text
