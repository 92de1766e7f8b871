"""
Utilities for handling file paths and deriving file names from URLs.
"""

import posixpath
from pathlib import Path
from urllib.parse import unquote, urlsplit

from pathvalidate import sanitize_filename

SUPPORTED_SCHEMES = ("http://", "https://")


def is_download_url(line: str) -> bool:
    """Only plain HTTP and HTTPS URLs are accepted as dependencies."""
    return line.startswith(SUPPORTED_SCHEMES)


def file_name_from_url(url: str) -> str | None:
    """
    Returns the last path component of a URL as a safe local file name.

    The query string and fragment are ignored and percent-escapes are decoded.
    Returns None when the URL path does not end in a file name.
    """
    path = urlsplit(url).path
    if not path or path.endswith("/"):
        return None
    name = unquote(posixpath.basename(path))
    if name in ("", ".", ".."):
        return None
    sanitized = sanitize_filename(name, platform="auto")
    return sanitized or None


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def temp_path_for(destination: Path) -> Path:
    """The partial-download path that sits next to the final destination."""
    return destination.with_name(f"{destination.name}.part")
