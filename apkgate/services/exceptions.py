"""Exceptions raised by the gate services."""


class ConfigurationError(RuntimeError):
    """Raised when a required service parameter is missing or invalid."""


class ArtifactNotFound(RuntimeError):
    """The APK file to be served does not exist."""


class DeliveryFailure(RuntimeError):
    """The APK could not be delivered (upstream or I/O error)."""
