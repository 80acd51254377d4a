"""blobdrive: file storage driver for Azure Blob Storage."""

__version__ = "0.1.0"
