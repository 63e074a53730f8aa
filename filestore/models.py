# filestore/models.py
from pydantic import BaseModel, Field, StrictStr, field_validator

from filestore.exceptions import InvalidRequest

# --- Utility Functions ---

def validate_key(key: str) -> str:
    """Rejects empty or non-string file keys before any I/O happens."""
    if not isinstance(key, str) or not key:
        raise InvalidRequest(f"File key must be a non-empty string, got {key!r}")
    return key

# --- Core Data Models ---

class FileRecord(BaseModel):
    """A stored file: the key it lives under and the URL it is served from."""
    key: str = Field(..., description="Identifier of the stored file")
    url: str = Field(..., description="URL the file service returned for the key")

    @field_validator('key')
    @classmethod
    def key_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("key must not be empty")
        return value

# --- Wire Models (File Service JSON) ---

class FileUrlResponse(BaseModel):
    """Body of a successful GET {endpoint}/{key}."""
    url: StrictStr

class FileKeyResponse(BaseModel):
    """Body of a successful upload or delete; the server echoes the key."""
    key: StrictStr

class DeleteFileRequest(BaseModel):
    """JSON body sent with DELETE {endpoint}."""
    key: str
