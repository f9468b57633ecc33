"""Fatal error types raised during a bootstrap run."""

from py_app_dev.core.exceptions import UserNotificationException


class DevSetupError(UserNotificationException):
    """Base class for errors that abort the bootstrap."""


class CommandError(DevSetupError):
    """Raised when an external command is missing or exits with a non-zero status."""


class DownloadError(DevSetupError):
    """Raised when a file download fails."""


class HashMismatchError(DevSetupError):
    """Raised when a file's SHA256 hash does not match the expected value."""


class UserDeclinedError(DevSetupError):
    """Raised when the operator refuses to install a required dependency."""


class HealthCheckError(DevSetupError):
    """Raised when an installed dependency reports itself as unhealthy."""


class SecretStoreError(DevSetupError):
    """Raised when the password manager is in a state the bootstrap cannot handle."""
