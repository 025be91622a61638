"""
Provides the in-memory registry of authorized devices.

The registry is owned by the application instance: :func:`init_app` builds a
:class:`DeviceRegistry` from the ``SEED_DEVICES`` configuration and attaches
it to ``app.extensions``. Request handlers reach it through
:func:`current_registry` or the module-level wrappers below, so there is no
module-level mutable state.
"""

import logging
from functools import wraps
from threading import Lock
from typing import Iterable, List, Optional, Union

from flask import Flask, current_app

from apkgate.domain import RevocationResult
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'device_registry'


class DeviceRegistry(object):
    """
    A set of device identifiers allowed to download the APK.

    Identifiers are opaque, case-sensitive strings. Every operation holds the
    instance lock, so simultaneous requests cannot corrupt the set.
    """

    def __init__(self, seed: Optional[Iterable[str]] = None) -> None:
        """Create a registry containing the (non-empty) ``seed`` ids."""
        self._devices = {device_id for device_id in (seed or []) if device_id}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._devices)

    def __contains__(self, device_id: object) -> bool:
        with self._lock:
            return device_id in self._devices

    def is_authorized(self, device_id: str) -> bool:
        """Check whether ``device_id`` is in the registry."""
        return device_id in self

    def authorize(self, device_id: str) -> int:
        """
        Add a device to the registry.

        Adding a device that is already present is not an error.

        Parameters
        ----------
        device_id : str

        Returns
        -------
        int
            The number of devices in the registry after the insert.

        """
        if not device_id:
            raise ValueError('device_id must be a non-empty string')
        with self._lock:
            self._devices.add(device_id)
            return len(self._devices)

    def revoke(self, device_id: str) -> RevocationResult:
        """
        Remove a device from the registry.

        Removing a device that is not present is not an error.

        Parameters
        ----------
        device_id : str

        Returns
        -------
        :class:`.RevocationResult`

        """
        with self._lock:
            was_authorized = device_id in self._devices
            self._devices.discard(device_id)
            return RevocationResult(was_authorized, len(self._devices))

    def devices(self) -> List[str]:
        """Get a snapshot of the registered device ids, sorted."""
        with self._lock:
            return sorted(self._devices)


def parse_seed(raw: Union[str, Iterable[str], None]) -> List[str]:
    """Parse a comma-separated list of device ids, dropping blanks."""
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = raw.split(',')
    return [device_id.strip() for device_id in raw if device_id.strip()]


def init_app(app: Flask) -> None:
    """Create the registry for ``app`` from its ``SEED_DEVICES`` config."""
    app.config.setdefault('SEED_DEVICES', '')
    seed = parse_seed(app.config['SEED_DEVICES'])
    app.extensions[EXTENSION_KEY] = DeviceRegistry(seed)
    logger.debug('Seeded device registry with %i devices', len(seed))


def current_registry() -> DeviceRegistry:
    """Get the :class:`.DeviceRegistry` of the current application."""
    try:
        return current_app.extensions[EXTENSION_KEY]
    except KeyError as e:
        raise ConfigurationError('Device registry is not initialized') from e


@wraps(DeviceRegistry.is_authorized)
def is_authorized(device_id: str) -> bool:
    """Check whether ``device_id`` is in the current registry."""
    return current_registry().is_authorized(device_id)


@wraps(DeviceRegistry.authorize)
def authorize(device_id: str) -> int:
    """Add a device to the current registry."""
    return current_registry().authorize(device_id)


@wraps(DeviceRegistry.revoke)
def revoke(device_id: str) -> RevocationResult:
    """Remove a device from the current registry."""
    return current_registry().revoke(device_id)


@wraps(DeviceRegistry.devices)
def list_devices() -> List[str]:
    """Get the device ids in the current registry."""
    return current_registry().devices()
