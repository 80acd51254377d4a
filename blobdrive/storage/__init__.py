"""
Storage module for blob-backed file management.

This module provides a file-system like interface over Azure Blob Storage,
with a driver registry so other backends can be plugged in.
"""

from .drivers import AzureStorageDriver, BaseStorageDriver, create_driver, register_driver
from .exceptions import (
    CannotCreateContainerError,
    CannotDeleteContainerError,
    CannotFindContainerError,
    CopyError,
    DeleteError,
    MetadataError,
    MoveError,
    ReadError,
    StorageException,
    VisibilityNotSupportedError,
    WriteError,
)
from .schemas import BlobEntry, CopyOptions, FileStats, ListOptions, PutOptions, SignedUrlOptions
from .service import DriveManager

__all__ = [
    "AzureStorageDriver",
    "BaseStorageDriver",
    "BlobEntry",
    "CannotCreateContainerError",
    "CannotDeleteContainerError",
    "CannotFindContainerError",
    "CopyError",
    "CopyOptions",
    "DeleteError",
    "DriveManager",
    "FileStats",
    "ListOptions",
    "MetadataError",
    "MoveError",
    "PutOptions",
    "ReadError",
    "SignedUrlOptions",
    "StorageException",
    "VisibilityNotSupportedError",
    "WriteError",
    "create_driver",
    "register_driver",
]
