"""
Storage error taxonomy.

Backend failures are never surfaced raw: drivers wrap them into one of the
exceptions below, carrying the location (or container) involved and the
original error as ``original``.
"""
from typing import Any, Dict, Optional

from blobdrive.core.exceptions import BlobDriveException


class StorageException(BlobDriveException):
    """Base class for storage operation errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        container: Optional[str] = None,
        original: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.container = container
        details = dict(details or {})
        if container is not None:
            details["container"] = container
        if original is not None:
            details["cause"] = f"{type(original).__name__}: {original}"
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            original=original
        )


class ReadError(StorageException):
    """Unable to read a blob."""

    def __init__(self, location: str, original: Optional[BaseException] = None, container: Optional[str] = None):
        self.location = location
        super().__init__(
            message=f'Cannot read file from location "{location}"',
            error_code="E_CANNOT_READ_FILE",
            container=container,
            original=original,
            details={"location": location}
        )


class WriteError(StorageException):
    """Unable to write a blob."""

    def __init__(self, location: str, original: Optional[BaseException] = None, container: Optional[str] = None):
        self.location = location
        super().__init__(
            message=f'Cannot write file at location "{location}"',
            error_code="E_CANNOT_WRITE_FILE",
            container=container,
            original=original,
            details={"location": location}
        )


class DeleteError(StorageException):
    """Unable to delete a blob."""

    def __init__(self, location: str, original: Optional[BaseException] = None, container: Optional[str] = None):
        self.location = location
        super().__init__(
            message=f'Cannot delete file at location "{location}"',
            error_code="E_CANNOT_DELETE_FILE",
            container=container,
            original=original,
            details={"location": location}
        )


class CopyError(StorageException):
    """Unable to copy a blob."""

    def __init__(
        self,
        source: str,
        destination: str,
        original: Optional[BaseException] = None,
        container: Optional[str] = None
    ):
        self.source = source
        self.destination = destination
        super().__init__(
            message=f'Cannot copy file from "{source}" to "{destination}"',
            error_code="E_CANNOT_COPY_FILE",
            container=container,
            original=original,
            details={"source": source, "destination": destination}
        )


class MoveError(StorageException):
    """
    Unable to move a blob.

    ``copied`` is True when the copy step succeeded and only the removal of
    the source failed, i.e. the destination now holds the data.
    """

    def __init__(
        self,
        source: str,
        destination: str,
        original: Optional[BaseException] = None,
        container: Optional[str] = None,
        copied: bool = False
    ):
        self.source = source
        self.destination = destination
        self.copied = copied
        super().__init__(
            message=f'Cannot move file from "{source}" to "{destination}"',
            error_code="E_CANNOT_MOVE_FILE",
            container=container,
            original=original,
            details={"source": source, "destination": destination, "copied": copied}
        )


class MetadataError(StorageException):
    """Unable to read metadata (existence, stats, urls) of a blob."""

    def __init__(
        self,
        location: str,
        operation: str,
        original: Optional[BaseException] = None,
        container: Optional[str] = None,
        reason: Optional[str] = None
    ):
        self.location = location
        self.operation = operation
        self.reason = reason
        details = {"location": location, "operation": operation}
        if reason is not None:
            details["reason"] = reason
        super().__init__(
            message=f'Unable to retrieve the "{operation}" for file at location "{location}"',
            error_code="E_CANNOT_GET_METADATA",
            container=container,
            original=original,
            details=details
        )


class VisibilityNotSupportedError(MetadataError):
    """Blob storage has no per-file visibility."""

    def __init__(self, location: str, container: Optional[str] = None):
        super().__init__(
            location=location,
            operation="visibility",
            container=container,
            reason="unsupported"
        )


class CannotCreateContainerError(StorageException):
    """Unable to create a container."""

    def __init__(self, container: str, original: Optional[BaseException] = None):
        super().__init__(
            message=f'Cannot create container "{container}"',
            error_code="E_CANNOT_CREATE_CONTAINER",
            container=container,
            original=original
        )


class CannotFindContainerError(StorageException):
    """Unable to check a container."""

    def __init__(self, container: str, original: Optional[BaseException] = None):
        super().__init__(
            message=f'Cannot find container "{container}"',
            error_code="E_CANNOT_FIND_CONTAINER",
            container=container,
            original=original
        )


class CannotDeleteContainerError(StorageException):
    """Unable to delete a container."""

    def __init__(self, container: str, original: Optional[BaseException] = None):
        super().__init__(
            message=f'Cannot delete container "{container}"',
            error_code="E_CANNOT_DELETE_CONTAINER",
            container=container,
            original=original
        )
