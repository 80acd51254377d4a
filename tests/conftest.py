"""
Shared test fixtures and utilities for the test suite.

This module provides an in-memory stand-in for the synchronous Azure Blob
Storage client surface used by the driver, plus configuration and driver
fixtures built on top of it.
"""
import hashlib
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, quote, unquote, urlsplit

import pytest
from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import BlobPrefix

from blobdrive.core.config import AzureStorageConfig
from blobdrive.storage.drivers.azure_driver import AzureStorageDriver

# Well-known Azurite development account
ACCOUNT_NAME = "devstoreaccount1"
ACCOUNT_KEY = "Eby8vdM02xNOcqFlqUwJPLlmEtlCDXJ1OUzFT50uSRZ6IFsuFq2UVErCz4I6tq/K1SZFPTOtr/KBHBeksoGMGw=="
SERVICE_URL = f"http://127.0.0.1:10000/{ACCOUNT_NAME}"
TEST_CONTAINER = "t1"


class FakeSharedKeyCredential:
    """Mimics StorageSharedKeyCredential."""

    def __init__(self, account_name: str, account_key: str):
        self.account_name = account_name
        self.account_key = account_key


class FakeDownloader:
    """Mimics StorageStreamDownloader."""

    chunk_size = 4

    def __init__(self, data: bytes):
        self.data = data
        self.size = len(data)

    def readall(self) -> bytes:
        return self.data

    def chunks(self):
        for start in range(0, len(self.data), self.chunk_size):
            yield self.data[start:start + self.chunk_size]


class FakeBlobClient:
    """Mimics azure.storage.blob.BlobClient."""

    def __init__(self, service: "FakeBlobServiceClient", container_name: str, blob_name: str):
        self.service = service
        self.container_name = container_name
        self.blob_name = blob_name
        self.account_name = service.account_name
        self.credential = service.credential
        self.url = f"{service.url}/{container_name}/{quote(blob_name, safe='~')}"

    def _blobs(self) -> Dict[str, Dict[str, Any]]:
        if self.container_name not in self.service.containers:
            raise ResourceNotFoundError(message=f"The specified container does not exist: {self.container_name}")
        return self.service.containers[self.container_name]

    def _blob(self) -> Dict[str, Any]:
        blob = self._blobs().get(self.blob_name)
        if blob is None:
            raise ResourceNotFoundError(message=f"The specified blob does not exist: {self.blob_name}")
        return blob

    def exists(self) -> bool:
        return self.blob_name in self.service.containers.get(self.container_name, {})

    def upload_blob(self, data, overwrite: bool = False, content_settings=None, metadata=None, **kwargs):
        self.service.calls.append(("upload_blob", self.blob_name, {
            "overwrite": overwrite,
            "content_settings": content_settings,
            "metadata": metadata,
            **kwargs,
        }))
        blobs = self._blobs()
        if not overwrite and self.blob_name in blobs:
            raise ResourceExistsError(message="The specified blob already exists")

        if isinstance(data, str):
            payload = data.encode("utf-8")
        elif isinstance(data, (bytes, bytearray)):
            payload = bytes(data)
        elif hasattr(data, "read"):
            payload = data.read()
        else:
            payload = b"".join(data)

        blobs[self.blob_name] = {
            "data": payload,
            "content_type": content_settings.content_type if content_settings else "application/octet-stream",
            "metadata": dict(metadata or {}),
            "last_modified": datetime.now(timezone.utc),
            "etag": '"0x' + hashlib.md5(payload).hexdigest()[:16].upper() + '"',
        }
        return {"etag": blobs[self.blob_name]["etag"]}

    def download_blob(self, offset: Optional[int] = None, length: Optional[int] = None, **kwargs):
        data = self._blob()["data"]
        if offset is not None:
            end = None if length is None else offset + length
            data = data[offset:end]
        return FakeDownloader(data)

    def delete_blob(self, **kwargs):
        self._blob()
        del self._blobs()[self.blob_name]

    def get_blob_properties(self, **kwargs):
        blob = self._blob()
        return SimpleNamespace(
            name=self.blob_name,
            size=len(blob["data"]),
            last_modified=blob["last_modified"],
            etag=blob["etag"],
            metadata=blob["metadata"],
        )

    def start_copy_from_url(self, source_url: str, requires_sync: bool = False, **kwargs):
        self.service.copy_urls.append(source_url)
        parts = urlsplit(source_url)
        query = parse_qs(parts.query)
        if "sig" not in query or "r" not in query.get("sp", [""])[0]:
            raise ResourceNotFoundError(message="CannotVerifyCopySource")

        path = unquote(source_url.split("?", 1)[0][len(self.service.url) + 1:])
        container_name, blob_name = path.split("/", 1)
        source = FakeBlobClient(self.service, container_name, blob_name)._blob()

        self._blobs()[self.blob_name] = dict(source, last_modified=datetime.now(timezone.utc))
        return {"copy_status": "success"}


class FakeContainerClient:
    """Mimics azure.storage.blob.ContainerClient."""

    def __init__(self, service: "FakeBlobServiceClient", container_name: str):
        self.service = service
        self.container_name = container_name

    def exists(self) -> bool:
        return self.container_name in self.service.containers

    def create_container(self, metadata=None, public_access=None, **kwargs):
        if self.container_name in self.service.containers:
            raise ResourceExistsError(message="The specified container already exists")
        self.service.containers[self.container_name] = {}
        return {"etag": '"0x1"', "last_modified": datetime.now(timezone.utc)}

    def delete_container(self, **kwargs):
        if self.container_name not in self.service.containers:
            raise ResourceNotFoundError(message="The specified container does not exist")
        del self.service.containers[self.container_name]

    def get_blob_client(self, blob: str) -> FakeBlobClient:
        return FakeBlobClient(self.service, self.container_name, blob)

    def walk_blobs(self, name_starts_with=None, include=None, delimiter="/", **kwargs):
        if self.container_name not in self.service.containers:
            raise ResourceNotFoundError(message="The specified container does not exist")

        prefix = name_starts_with or ""
        seen_prefixes = set()
        for name in sorted(self.service.containers[self.container_name]):
            if not name.startswith(prefix):
                continue
            rest = name[len(prefix):]
            if delimiter in rest:
                virtual = prefix + rest.split(delimiter, 1)[0] + delimiter
                if virtual not in seen_prefixes:
                    seen_prefixes.add(virtual)
                    item = BlobPrefix.__new__(BlobPrefix)
                    item.name = virtual
                    yield item
                continue

            blob = self.service.containers[self.container_name][name]
            yield SimpleNamespace(
                name=name,
                size=len(blob["data"]),
                last_modified=blob["last_modified"],
                etag=blob["etag"],
                content_settings=SimpleNamespace(content_type=blob["content_type"]),
                metadata=blob["metadata"] if include and "metadata" in include else None,
            )


class FakeBlobServiceClient:
    """Mimics azure.storage.blob.BlobServiceClient, storing blobs in memory."""

    def __init__(self, credential: Any = None):
        self.url = SERVICE_URL
        self.account_name = ACCOUNT_NAME
        self.credential = credential if credential is not None else FakeSharedKeyCredential(ACCOUNT_NAME, ACCOUNT_KEY)
        self.containers: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.copy_urls: List[str] = []

    def get_container_client(self, container: str) -> FakeContainerClient:
        return FakeContainerClient(self, container)


@pytest.fixture
def fake_service() -> FakeBlobServiceClient:
    """Empty in-memory blob service."""
    return FakeBlobServiceClient()


@pytest.fixture
def azure_config() -> AzureStorageConfig:
    """Disk configuration pointing at the test container."""
    return AzureStorageConfig(
        container=TEST_CONTAINER,
        name=ACCOUNT_NAME,
        key=ACCOUNT_KEY,
        local_address=SERVICE_URL,
    )


@pytest.fixture
def driver(azure_config, fake_service) -> AzureStorageDriver:
    """Driver bound to an existing, empty test container."""
    fake_service.containers[TEST_CONTAINER] = {}
    return AzureStorageDriver(azure_config, service_client=fake_service)


@pytest.fixture
def sample_file_content() -> bytes:
    """Sample file content for testing."""
    return b"This is a test file content for testing purposes."


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "storage: mark test as storage related"
    )
    config.addinivalue_line(
        "markers", "sas: mark test as shared access signature related"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on test names."""
    for item in items:
        if "test_sas" in item.nodeid:
            item.add_marker(pytest.mark.sas)
        elif "test_azure_driver" in item.nodeid or "test_storage" in item.nodeid:
            item.add_marker(pytest.mark.storage)
        else:
            item.add_marker(pytest.mark.unit)
