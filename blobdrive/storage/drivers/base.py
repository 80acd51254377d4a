"""
Base storage driver interface.

Defines the contract that all storage drivers must implement.
"""

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, List, Optional, Union

from ..schemas import BlobEntry, CopyOptions, FileStats, ListOptions, PutOptions, SignedUrlOptions


class BaseStorageDriver(ABC):
    """Abstract base class for storage drivers."""

    #: Registry name of the driver
    name: str = ""

    def __init__(self, config: Any):
        """
        Initialize the storage driver.

        Args:
            config: Driver specific configuration
        """
        self.config = config

    @abstractmethod
    async def exists(self, location: str) -> bool:
        """
        Check if a file exists in storage.

        Args:
            location: Path of the file

        Returns:
            True if file exists
        """
        pass

    @abstractmethod
    async def get(self, location: str) -> bytes:
        """
        Return the file contents.

        Args:
            location: Path of the file

        Returns:
            The whole file as bytes
        """
        pass

    @abstractmethod
    async def get_stream(self, location: str) -> AsyncIterator[bytes]:
        """
        Return the file contents as a single-pass stream of chunks.

        Args:
            location: Path of the file

        Returns:
            Async iterator of byte chunks
        """
        pass

    @abstractmethod
    async def put(
        self,
        location: str,
        contents: Union[bytes, str],
        options: Optional[PutOptions] = None
    ) -> None:
        """
        Write contents to a location, replacing any existing file.

        Args:
            location: Path of the file
            contents: Data to write
            options: Content type and metadata
        """
        pass

    @abstractmethod
    async def put_stream(self, location: str, stream: Any, options: Optional[PutOptions] = None) -> None:
        """
        Write a stream of unknown length to a location.

        Args:
            location: Path of the file
            stream: Binary file object, iterable or async iterable of bytes
            options: Content type and metadata
        """
        pass

    @abstractmethod
    async def delete(self, location: str) -> None:
        """
        Delete a file from storage.

        Args:
            location: Path of the file
        """
        pass

    @abstractmethod
    async def copy(self, source: str, destination: str, options: Optional[CopyOptions] = None) -> None:
        """
        Copy a file within storage.

        Args:
            source: Source path
            destination: Destination path
            options: Copy options
        """
        pass

    @abstractmethod
    async def move(self, source: str, destination: str, options: Optional[CopyOptions] = None) -> None:
        """
        Move/rename a file within storage.

        Args:
            source: Source path
            destination: Destination path
            options: Copy options
        """
        pass

    @abstractmethod
    async def get_url(self, location: str) -> str:
        """Return the public URL of a file."""
        pass

    @abstractmethod
    async def get_signed_url(self, location: str, options: Optional[SignedUrlOptions] = None) -> str:
        """
        Generate a signed URL for time-limited file access.

        Args:
            location: Path of the file
            options: Permissions and validity window

        Returns:
            Signed URL
        """
        pass

    @abstractmethod
    async def get_stats(self, location: str) -> FileStats:
        """Return size, modification time and etag of a file."""
        pass

    @abstractmethod
    async def list(self, prefix: str = "", options: Optional[ListOptions] = None) -> List[BlobEntry]:
        """
        List files one level below a prefix.

        Args:
            prefix: Optional prefix filter
            options: Listing options

        Returns:
            List of file entries
        """
        pass

    @abstractmethod
    async def get_visibility(self, location: str) -> str:
        """Return the visibility of a file."""
        pass

    @abstractmethod
    async def set_visibility(self, location: str, visibility: str) -> None:
        """Set the visibility of a file."""
        pass
