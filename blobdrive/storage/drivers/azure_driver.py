"""
Azure Blob Storage driver implementation.

Emulates file semantics over containers and blobs: paths containing '/'
are plain blob names, copy is a server-side copy from a short-lived SAS URL
and move is copy followed by delete of the source.
"""

import asyncio
import functools
from typing import Any, AsyncIterator, Dict, Iterator, List, Optional, Union
from urllib.parse import unquote

from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.storage.blob import BlobClient, BlobPrefix, BlobServiceClient, ContentSettings
from structlog import get_logger

from blobdrive.core.config import AzureStorageConfig
from blobdrive.core.exceptions import ConfigurationError

from ..credentials import resolve_service_client
from ..exceptions import (
    CannotCreateContainerError,
    CannotDeleteContainerError,
    CannotFindContainerError,
    CopyError,
    DeleteError,
    MetadataError,
    MoveError,
    ReadError,
    VisibilityNotSupportedError,
    WriteError,
)
from ..sas import resolve_sas, sign_blob_url
from ..schemas import BlobEntry, CopyOptions, FileStats, ListOptions, PutOptions, SignedUrlOptions
from .base import BaseStorageDriver

logger = get_logger(__name__)


async def _anext(iterator: Any) -> Optional[bytes]:
    try:
        return await iterator.__anext__()
    except StopAsyncIteration:
        return None


class AzureStorageDriver(BaseStorageDriver):
    """Azure Blob Storage driver bound to one container."""

    name = "azure"

    def __init__(self, config: AzureStorageConfig, service_client: Optional[BlobServiceClient] = None):
        """
        Initialize Azure storage driver.

        Args:
            config: Disk configuration
            service_client: Already connected client, resolved from config when omitted
        """
        super().__init__(config)
        self.adapter = service_client if service_client is not None else resolve_service_client(config)

    @property
    def container_name(self) -> Optional[str]:
        """Container this driver operates on."""
        return self.config.container

    def container(self, name: str) -> "AzureStorageDriver":
        """
        Return a driver bound to another container.

        The new driver shares the service client; this instance is unchanged.
        """
        return type(self)(self.config.model_copy(update={"container": name}), service_client=self.adapter)

    def _require_container(self) -> str:
        if not self.container_name:
            raise ConfigurationError("No container configured for Azure storage driver")
        return self.container_name

    def _blob_client(self, location: str, container: Optional[str] = None) -> BlobClient:
        container_client = self.adapter.get_container_client(container or self._require_container())
        return container_client.get_blob_client(location)

    async def _run(self, func, *args, **kwargs):
        # Azure SDK client is synchronous
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    def _upload_kwargs(self, options: PutOptions) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "overwrite": options.overwrite,
            "max_concurrency": self.config.max_concurrency,
        }
        if options.content_type is not None:
            kwargs["content_settings"] = ContentSettings(content_type=options.content_type)
        if options.metadata is not None:
            kwargs["metadata"] = dict(options.metadata)
        return kwargs

    def _download_kwargs(self, offset: Optional[int], length: Optional[int]) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"max_concurrency": self.config.max_concurrency}
        if offset is not None or length is not None:
            kwargs["offset"] = offset or 0
            kwargs["length"] = length
        return kwargs

    async def _signed_url(self, blob_client: BlobClient, options: Optional[SignedUrlOptions]) -> str:
        descriptor = resolve_sas(
            blob_client.container_name,
            blob_client.blob_name,
            options,
            default_expiry=self.config.sas_expiry_seconds
        )
        return await self._run(sign_blob_url, self.adapter, blob_client, descriptor)

    async def exists_container(self, container: str) -> bool:
        """Check whether a container exists."""
        container_client = self.adapter.get_container_client(container)
        try:
            return await self._run(container_client.exists)
        except AzureError as e:
            logger.error("Failed to check Azure container", error=str(e), container=container)
            raise CannotFindContainerError(container, e) from e

    async def create_container(
        self,
        container: str,
        metadata: Optional[Dict[str, str]] = None,
        public_access: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create a container. Fails if it already exists.

        Args:
            container: Container name
            metadata: Optional container metadata
            public_access: Optional public access level ('container' or 'blob')

        Returns:
            Response headers of the create call
        """
        container_client = self.adapter.get_container_client(container)
        try:
            response = await self._run(
                container_client.create_container,
                metadata=metadata,
                public_access=public_access
            )
        except AzureError as e:
            logger.error("Failed to create Azure container", error=str(e), container=container)
            raise CannotCreateContainerError(container, e) from e

        logger.info("Created Azure container", container=container)
        return response

    async def delete_container(self, container: str) -> None:
        """Mark a container and its blobs for deletion."""
        container_client = self.adapter.get_container_client(container)
        try:
            await self._run(container_client.delete_container)
        except AzureError as e:
            logger.error("Failed to delete Azure container", error=str(e), container=container)
            raise CannotDeleteContainerError(container, e) from e

        logger.info("Deleted Azure container", container=container)

    async def exists(self, location: str) -> bool:
        """Check if a blob exists. Missing blobs and prefixes both yield False."""
        blob_client = self._blob_client(location)
        try:
            return await self._run(blob_client.exists)
        except AzureError as e:
            logger.error("Failed to check blob existence", error=str(e), location=location)
            raise MetadataError(location, "exists", e, self.container_name) from e

    async def get(self, location: str, offset: Optional[int] = None, length: Optional[int] = None) -> bytes:
        """Download a blob, or a byte range of it, into memory."""
        blob_client = self._blob_client(location)
        try:
            downloader = await self._run(blob_client.download_blob, **self._download_kwargs(offset, length))
            return await self._run(downloader.readall)
        except AzureError as e:
            logger.error("Failed to download blob", error=str(e), location=location)
            raise ReadError(location, e, self.container_name) from e

    async def get_stream(
        self,
        location: str,
        offset: Optional[int] = None,
        length: Optional[int] = None
    ) -> AsyncIterator[bytes]:
        """
        Open a blob for streaming.

        The download is started before returning, so a missing blob raises
        ReadError here rather than on first iteration.
        """
        blob_client = self._blob_client(location)
        try:
            downloader = await self._run(blob_client.download_blob, **self._download_kwargs(offset, length))
        except AzureError as e:
            logger.error("Failed to open blob stream", error=str(e), location=location)
            raise ReadError(location, e, self.container_name) from e

        return self._iter_chunks(location, downloader.chunks())

    async def _iter_chunks(self, location: str, chunks: Iterator[bytes]) -> AsyncIterator[bytes]:
        while True:
            try:
                chunk = await self._run(next, chunks, None)
            except AzureError as e:
                logger.error("Blob stream interrupted", error=str(e), location=location)
                raise ReadError(location, e, self.container_name) from e
            if chunk is None:
                return
            yield chunk

    async def put(
        self,
        location: str,
        contents: Union[bytes, str],
        options: Optional[PutOptions] = None
    ) -> None:
        """Upload contents, overwriting the blob unless options say otherwise."""
        options = options or PutOptions()
        blob_client = self._blob_client(location)
        try:
            await self._run(blob_client.upload_blob, contents, **self._upload_kwargs(options))
        except AzureError as e:
            logger.error("Failed to upload blob", error=str(e), location=location)
            raise WriteError(location, e, self.container_name) from e

        logger.info("File uploaded to Azure", location=location, size=len(contents), container=self.container_name)

    async def put_stream(self, location: str, stream: Any, options: Optional[PutOptions] = None) -> None:
        """
        Upload a stream of unknown length as a chunked block upload.

        Args:
            location: Path of the blob
            stream: Binary file object, iterable of bytes or async iterable of bytes
            options: Content type and metadata
        """
        options = options or PutOptions()
        blob_client = self._blob_client(location)

        data = stream
        if hasattr(stream, "__aiter__"):
            data = self._sync_chunks(stream.__aiter__(), asyncio.get_event_loop())

        # The source is caller supplied and may fail mid upload as well
        try:
            await self._run(blob_client.upload_blob, data, **self._upload_kwargs(options))
        except Exception as e:
            logger.error("Failed to upload blob stream", error=str(e), location=location)
            raise WriteError(location, e, self.container_name) from e

        logger.info("File stream uploaded to Azure", location=location, container=self.container_name)

    @staticmethod
    def _sync_chunks(iterator: Any, loop: asyncio.AbstractEventLoop) -> Iterator[bytes]:
        # Runs in the executor thread, pulls chunks from the event loop
        while True:
            chunk = asyncio.run_coroutine_threadsafe(_anext(iterator), loop).result()
            if chunk is None:
                return
            yield chunk

    async def delete(self, location: str) -> None:
        """
        Delete a blob.

        A missing blob raises DeleteError unless ``delete_missing_ok`` is set.
        """
        blob_client = self._blob_client(location)
        try:
            await self._run(blob_client.delete_blob)
        except ResourceNotFoundError as e:
            if self.config.delete_missing_ok:
                logger.info("Blob already absent", location=location, container=self.container_name)
                return
            logger.error("Failed to delete missing blob", error=str(e), location=location)
            raise DeleteError(location, e, self.container_name) from e
        except AzureError as e:
            logger.error("Failed to delete blob", error=str(e), location=location)
            raise DeleteError(location, e, self.container_name) from e

        logger.info("File deleted from Azure", location=location, container=self.container_name)

    async def copy(self, source: str, destination: str, options: Optional[CopyOptions] = None) -> None:
        """
        Server-side copy through a read-only SAS URL of the source.

        The destination container defaults to this driver's container.
        """
        options = options or CopyOptions()
        source_client = self._blob_client(source)
        destination_client = self._blob_client(destination, options.destination_container)

        try:
            url = await self._signed_url(source_client, options)
            await self._run(destination_client.start_copy_from_url, url, requires_sync=True)
        except (AzureError, ValueError) as e:
            logger.error("Failed to copy blob", error=str(e), source=source, destination=destination)
            raise CopyError(source, destination, e, self.container_name) from e

        logger.info(
            "File copied in Azure",
            source=source,
            destination=destination,
            container=self.container_name,
            destination_container=destination_client.container_name
        )

    async def move(self, source: str, destination: str, options: Optional[CopyOptions] = None) -> None:
        """
        Move a blob as copy then delete. Not atomic.

        If the delete fails after a successful copy the source survives next to
        the destination and MoveError is raised with ``copied`` set. Moving a
        blob onto itself is rejected before anything is copied.
        """
        options = options or CopyOptions()
        destination_container = options.destination_container or self.container_name
        if source == destination and destination_container == self.container_name:
            logger.error("Refusing to move blob onto itself", location=source, container=self.container_name)
            raise MoveError(source, destination, None, self.container_name, copied=False)

        try:
            await self.copy(source, destination, options)
        except CopyError as e:
            raise MoveError(source, destination, e, self.container_name, copied=False) from e

        try:
            await self.delete(source)
        except DeleteError as e:
            logger.warning("Move left source behind", source=source, destination=destination)
            raise MoveError(source, destination, e, self.container_name, copied=True) from e

        logger.info("File moved in Azure", source=source, destination=destination, container=self.container_name)

    async def get_url(self, location: str) -> str:
        """Return the blob URL with escaped path separators restored."""
        return unquote(self._blob_client(location).url)

    async def get_signed_url(self, location: str, options: Optional[SignedUrlOptions] = None) -> str:
        """Return the blob URL with a SAS appended."""
        blob_client = self._blob_client(location)
        try:
            return await self._signed_url(blob_client, options)
        except (AzureError, ValueError) as e:
            logger.error("Failed to generate signed URL", error=str(e), location=location)
            raise MetadataError(location, "signedUrl", e, self.container_name) from e

    async def get_stats(self, location: str) -> FileStats:
        """Return size, last modified time and etag of a blob."""
        blob_client = self._blob_client(location)
        try:
            properties = await self._run(blob_client.get_blob_properties)
        except AzureError as e:
            logger.error("Failed to get blob properties", error=str(e), location=location)
            raise MetadataError(location, "stats", e, self.container_name) from e

        return FileStats(
            size=properties.size,
            modified=properties.last_modified,
            is_file=True,
            etag=properties.etag
        )

    async def list(self, prefix: str = "", options: Optional[ListOptions] = None) -> List[BlobEntry]:
        """
        List blobs one level below ``prefix`` using '/' as delimiter.

        Virtual folders are skipped; entries keep backend order.
        """
        options = options or ListOptions()
        container_client = self.adapter.get_container_client(self._require_container())
        include = ["metadata"] if options.include_metadata else None

        def _walk() -> list:
            return [
                item
                for item in container_client.walk_blobs(name_starts_with=prefix or None, include=include, delimiter="/")
                if not isinstance(item, BlobPrefix)
            ]

        try:
            items = await self._run(_walk)
        except AzureError as e:
            logger.error("Failed to list blobs", error=str(e), prefix=prefix)
            raise MetadataError(prefix, "list", e, self.container_name) from e

        return [
            BlobEntry(
                name=item.name,
                size=item.size,
                modified=item.last_modified,
                etag=item.etag,
                content_type=item.content_settings.content_type if item.content_settings else None,
                metadata=item.metadata if options.include_metadata else None
            )
            for item in items
        ]

    async def get_visibility(self, location: str) -> str:
        """Not supported by blob storage."""
        raise VisibilityNotSupportedError(location, self.container_name)

    async def set_visibility(self, location: str, visibility: str) -> None:
        """Not supported by blob storage."""
        raise VisibilityNotSupportedError(location, self.container_name)
