"""
Storage module schemas.

Pydantic models for per-operation options and for the values drivers return.
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SignedUrlOptions(BaseModel):
    """Options for SAS generation. Unset values take the documented defaults."""

    model_config = ConfigDict(frozen=True)

    permissions: str = Field("r", description="SAS permission string, read-only by default")
    starts_on: Optional[datetime] = Field(None, description="Start of validity, defaults to now")
    expires_on: Optional[datetime] = Field(None, description="End of validity, wins over expiry")
    expiry: Optional[int] = Field(None, gt=0, description="Validity in seconds from starts_on")

    @field_validator('permissions')
    def validate_permissions(cls, v):
        """Validate permission string format."""
        if not v or not v.isalpha():
            raise ValueError("Permissions must be a non-empty string of permission letters")
        return v


class CopyOptions(SignedUrlOptions):
    """Options for server-side copy; SAS fields apply to the source URL."""

    destination_container: Optional[str] = Field(None, description="Target container, defaults to the source's")


class PutOptions(BaseModel):
    """Options for uploads. Unset fields are not sent to the backend."""

    model_config = ConfigDict(frozen=True)

    content_type: Optional[str] = Field(None, description="MIME type")
    metadata: Optional[Dict[str, str]] = Field(None, description="Custom metadata")
    overwrite: bool = Field(True, description="Replace an existing blob")


class ListOptions(BaseModel):
    """Options for prefix listing."""

    model_config = ConfigDict(frozen=True)

    include_metadata: bool = Field(False, description="Return custom metadata with each entry")


class SasDescriptor(BaseModel):
    """A resolved, ready to sign, shared access signature."""

    model_config = ConfigDict(frozen=True)

    container_name: str = Field(..., description="Container the SAS is scoped to")
    blob_name: str = Field(..., description="Blob the SAS is scoped to")
    permissions: str = Field(..., description="SAS permission string")
    starts_on: datetime = Field(..., description="Start of validity")
    expires_on: datetime = Field(..., description="End of validity")

    @model_validator(mode='after')
    def validate_window(self):
        if self.expires_on <= self.starts_on:
            raise ValueError("SAS expires_on must be later than starts_on")
        return self


class FileStats(BaseModel):
    """File statistics derived from blob properties."""

    model_config = ConfigDict(from_attributes=True)

    size: int = Field(..., description="File size in bytes")
    modified: datetime = Field(..., description="Last modification timestamp")
    is_file: bool = Field(True, description="Always true for blobs")
    etag: Optional[str] = Field(None, description="Opaque version token")


class BlobEntry(BaseModel):
    """A blob returned by a prefix listing."""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., description="Blob path within the container")
    size: Optional[int] = Field(None, description="Blob size in bytes")
    modified: Optional[datetime] = Field(None, description="Last modification timestamp")
    etag: Optional[str] = Field(None, description="Opaque version token")
    content_type: Optional[str] = Field(None, description="MIME type")
    metadata: Optional[Dict[str, str]] = Field(None, description="Custom metadata")
