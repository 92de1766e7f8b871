"""
Transfer Layer.

This package is responsible for moving bytes: downloading files over HTTP
and validating what arrived.
"""

from .downloader import Downloader, close_connection_pool
from .integrity import ArchiveIntegrityChecker

__all__ = ["ArchiveIntegrityChecker", "Downloader", "close_connection_pool"]
