"""Core data structures for the device gate."""

from typing import NamedTuple


class RevocationResult(NamedTuple):
    """Outcome of removing a device from the registry."""

    was_authorized: bool
    """Whether the device was in the registry before the removal."""

    total_devices: int
    """Size of the registry after the removal."""
