"""
Storage drivers package.

Contains implementations of different storage backends and the registry
mapping driver names to their factories.
"""

from typing import Any, Callable, Dict, List

from blobdrive.core.exceptions import ConfigurationError

from .azure_driver import AzureStorageDriver
from .base import BaseStorageDriver

DriverFactory = Callable[[Any], BaseStorageDriver]

_registry: Dict[str, DriverFactory] = {}


def register_driver(name: str, factory: DriverFactory) -> None:
    """Register a driver factory under a name, replacing any previous one."""
    _registry[name.lower()] = factory


def get_driver_factory(name: str) -> DriverFactory:
    """Look up a registered driver factory."""
    try:
        return _registry[name.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported storage driver: {name}",
            details={"driver": name, "available": registered_drivers()}
        ) from None


def registered_drivers() -> List[str]:
    """Names of all registered drivers."""
    return sorted(_registry)


def create_driver(config: Any) -> BaseStorageDriver:
    """Instantiate the driver named by ``config.driver``."""
    return get_driver_factory(config.driver)(config)


register_driver(AzureStorageDriver.name, AzureStorageDriver)

__all__ = [
    "AzureStorageDriver",
    "BaseStorageDriver",
    "DriverFactory",
    "create_driver",
    "get_driver_factory",
    "register_driver",
    "registered_drivers",
]
