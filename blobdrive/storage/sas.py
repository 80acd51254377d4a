"""
Shared Access Signature (SAS) generation.

resolve_sas() applies the defaulting rules to caller options and yields a
SasDescriptor; sign_blob_url() turns a descriptor into a signed blob URL
using the account key of a shared-key credential, or a user delegation key
when the client authenticates with a token credential.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from azure.storage.blob import BlobClient, BlobSasPermissions, BlobServiceClient, generate_blob_sas
from structlog import get_logger

from .schemas import SasDescriptor, SignedUrlOptions

logger = get_logger(__name__)

DEFAULT_SAS_EXPIRY_SECONDS = 3600


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_sas(
    container_name: str,
    blob_name: str,
    options: Optional[SignedUrlOptions] = None,
    default_expiry: int = DEFAULT_SAS_EXPIRY_SECONDS,
    now: Optional[datetime] = None
) -> SasDescriptor:
    """
    Resolve a SAS descriptor from caller options.

    Defaults: permissions ``r``; ``starts_on`` now; ``expires_on`` is
    ``starts_on`` plus ``options.expiry`` (or ``default_expiry``) seconds
    unless given explicitly, in which case no duration is applied.

    Raises:
        ValueError: If the resulting window is empty or inverted
    """
    options = options or SignedUrlOptions()

    if options.starts_on is not None:
        starts_on = _as_utc(options.starts_on)
    else:
        starts_on = _as_utc(now) if now is not None else datetime.now(timezone.utc)

    if options.expires_on is not None:
        expires_on = _as_utc(options.expires_on)
    else:
        expires_on = starts_on + timedelta(seconds=options.expiry or default_expiry)

    return SasDescriptor(
        container_name=container_name,
        blob_name=blob_name,
        permissions=options.permissions,
        starts_on=starts_on,
        expires_on=expires_on
    )


def signing_key(service_client: BlobServiceClient, descriptor: SasDescriptor) -> Dict[str, Any]:
    """
    Pick the key material used to sign a SAS.

    Returns keyword arguments for ``generate_blob_sas``: ``account_key`` for
    shared-key credentials, otherwise a ``user_delegation_key`` fetched from
    the service for the descriptor's window.
    """
    credential = service_client.credential

    account_key = getattr(credential, "account_key", None)
    if account_key:
        return {"account_key": account_key}

    if credential is not None and hasattr(credential, "get_token"):
        delegation_key = service_client.get_user_delegation_key(
            key_start_time=descriptor.starts_on,
            key_expiry_time=descriptor.expires_on
        )
        logger.debug("Fetched user delegation key", container=descriptor.container_name)
        return {"user_delegation_key": delegation_key}

    # Clients holding only a SAS token (e.g. a SAS connection string) end up here
    raise ValueError(
        "The configured credential cannot sign shared access signatures: "
        "an account key or a token credential is required, a SAS token credential cannot issue new ones"
    )


def generate_sas_token(account_name: str, descriptor: SasDescriptor, **key: Any) -> str:
    """Sign a descriptor and return the SAS query string (without leading '?')."""
    return generate_blob_sas(
        account_name=account_name,
        container_name=descriptor.container_name,
        blob_name=descriptor.blob_name,
        permission=BlobSasPermissions.from_string(descriptor.permissions),
        start=descriptor.starts_on,
        expiry=descriptor.expires_on,
        **key
    )


def sign_blob_url(
    service_client: BlobServiceClient,
    blob_client: BlobClient,
    descriptor: SasDescriptor
) -> str:
    """Return ``blob_client.url`` with a SAS for ``descriptor`` appended."""
    key = signing_key(service_client, descriptor)
    token = generate_sas_token(blob_client.account_name, descriptor, **key)
    return f"{blob_client.url}?{token}"
