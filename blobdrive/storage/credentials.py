"""
Credential and endpoint resolution for Azure Blob Storage.

Precedence: connection string, then service principal
(tenant/client/secret), then shared key (account name/key). An account
name without key or secret falls back to DefaultAzureCredential, which
covers managed identities.
"""

from azure.core.credentials import AzureNamedKeyCredential
from azure.identity import ClientSecretCredential, DefaultAzureCredential
from azure.storage.blob import BlobServiceClient
from structlog import get_logger

from blobdrive.core.config import AzureStorageConfig
from blobdrive.core.exceptions import ConfigurationError

logger = get_logger(__name__)


def resolve_credential(config: AzureStorageConfig):
    """Build the credential object for a non connection-string config."""
    if config.azure_tenant_id and config.azure_client_id and config.azure_client_secret:
        return ClientSecretCredential(
            tenant_id=config.azure_tenant_id,
            client_id=config.azure_client_id,
            client_secret=config.azure_client_secret
        )

    if config.name and config.key:
        return AzureNamedKeyCredential(config.name, config.key)

    if config.name:
        return DefaultAzureCredential()

    raise ConfigurationError(
        "Azure storage requires a connection string, a service principal or an account name",
        details={"container": config.container}
    )


def resolve_service_client(config: AzureStorageConfig) -> BlobServiceClient:
    """
    Create a connected BlobServiceClient for a disk configuration.

    Args:
        config: Azure disk configuration

    Returns:
        BlobServiceClient bound to the resolved endpoint and credential
    """
    if config.connection_string is not None:
        logger.debug("Using connection string credentials", container=config.container)
        return BlobServiceClient.from_connection_string(config.connection_string)

    if config.name is None and config.local_address is None:
        raise ConfigurationError(
            "Azure storage requires an account name or a local address",
            details={"container": config.container}
        )

    credential = resolve_credential(config)
    logger.debug(
        "Resolved Azure credential",
        credential=type(credential).__name__,
        account_url=config.service_url
    )
    return BlobServiceClient(account_url=config.service_url, credential=credential)
