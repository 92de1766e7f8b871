"""
Parses dependency manifests: plain-text files listing one download URL per line.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from jardownloader.exceptions import ManifestReadError, SourceNotFoundError
from jardownloader.models.dependency import Dependency, ManifestParseResult
from jardownloader.utils.path import file_name_from_url, is_download_url

log = logging.getLogger(__name__)


def parse_manifest_lines(lines: Iterable[str], source: str) -> ManifestParseResult:
    """
    Turns manifest lines into dependencies.

    Blank lines and '#' comments are skipped. HTTP/HTTPS URLs with a file name
    become dependencies; everything else is collected as ignored.
    """
    result = ManifestParseResult(source=source)
    for line_number, raw_line in enumerate(lines, 1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        if not is_download_url(line):
            result.ignored.append((line_number, line))
            continue

        file_name = file_name_from_url(line)
        if not file_name:
            log.debug(f"No file name in URL on line {line_number} of {source}")
            result.ignored.append((line_number, line))
            continue

        result.dependencies.append(
            Dependency(
                url=line, file_name=file_name, source=source, line_number=line_number
            )
        )
    return result


def read_manifest_file(path: Path) -> ManifestParseResult:
    """
    Reads and parses a manifest from disk.

    Raises:
        SourceNotFoundError: If the file does not exist.
        ManifestReadError: If the file cannot be read or is not valid UTF-8.
    """
    if not path.is_file():
        raise SourceNotFoundError(f"Dependency file not found: {path}")
    try:
        with open(path, encoding="utf-8-sig") as f:
            return parse_manifest_lines(f, source=str(path))
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestReadError(
            f"Error reading dependency file '{path}': {e}"
        ) from e
