"""
Data Models Layer.

This package contains the Pydantic configuration model and the plain
dataclasses shared across the application: manifest entries and session
statistics.
"""

from .config import DownloadConfig
from .dependency import Dependency, ManifestParseResult
from .stats import DownloadStats

__all__ = ["Dependency", "DownloadConfig", "DownloadStats", "ManifestParseResult"]
