"""
Storage service layer.

DriveManager is the facade callers use to pick a disk by name; it builds
each disk's driver from the registry once and reuses it afterwards.
"""

from typing import Any, Dict, List, Mapping, Optional

from blobdrive.core.config import get_settings
from blobdrive.core.exceptions import ConfigurationError
from blobdrive.core.logger import get_logger, log_error
from blobdrive.storage.drivers import BaseStorageDriver, DriverFactory, create_driver, register_driver

logger = get_logger(__name__)
settings = get_settings()


class DriveManager:
    """Named storage disks backed by registered drivers."""

    def __init__(self, disks: Mapping[str, Any], default: Optional[str] = None):
        """
        Initialize the manager.

        Args:
            disks: Disk name to driver configuration (each with a ``driver`` field)
            default: Disk used when ``use()`` is called without a name
        """
        self.disks: Dict[str, Any] = dict(disks)
        self.default = default or settings.default_disk
        self._drivers: Dict[str, BaseStorageDriver] = {}

    def use(self, name: Optional[str] = None) -> BaseStorageDriver:
        """Get the driver of a disk, creating it on first use."""
        disk = name or self.default

        if disk not in self._drivers:
            config = self.disks.get(disk)
            if config is None:
                raise ConfigurationError(f"Storage disk '{disk}' is not configured", details={"disk": disk})

            try:
                self._drivers[disk] = create_driver(config)
            except ConfigurationError as e:
                logger.error("Failed to create storage driver", disk=disk, **log_error(e))
                raise

            logger.info("Storage disk ready", disk=disk, driver=self._drivers[disk].name)

        return self._drivers[disk]

    def extend(self, name: str, factory: DriverFactory) -> None:
        """Register an additional driver usable by disk configurations."""
        register_driver(name, factory)

    def list_disks(self) -> List[str]:
        """Names of the configured disks."""
        return sorted(self.disks)
