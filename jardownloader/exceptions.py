"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class JarDownloaderError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(JarDownloaderError):
    """Raised for issues related to configuration loading or validation."""


class SourceNotFoundError(JarDownloaderError):
    """Raised when a manifest file or search path does not exist."""


class ManifestReadError(JarDownloaderError):
    """Raised when a manifest exists but cannot be read or decoded."""


class InvalidArchiveError(JarDownloaderError):
    """Raised when a file with a .jar extension is not a readable ZIP archive."""


class FileIntegrityError(JarDownloaderError):
    """Raised when a downloaded file fails a post-download integrity check."""
