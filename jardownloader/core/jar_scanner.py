"""
Locates jar archives on disk and extracts the dependency manifests embedded in them.
"""

import io
import logging
import os
import zipfile
from pathlib import Path

from jardownloader.core.manifest import parse_manifest_lines
from jardownloader.exceptions import InvalidArchiveError, SourceNotFoundError
from jardownloader.models.dependency import ManifestParseResult

log = logging.getLogger(__name__)

JAR_SUFFIX = ".jar"


def find_jar_files(search_path: Path) -> list[Path]:
    """
    Recursively collects every .jar file below search_path, sorted by path.
    A search path that is itself a jar yields just that file.
    """
    if not search_path.exists():
        raise SourceNotFoundError(f"Search path not found: {search_path}")

    if search_path.is_file():
        return [search_path] if search_path.name.endswith(JAR_SUFFIX) else []

    jars = []
    for root, _dirs, files in os.walk(search_path):
        for name in files:
            if name.endswith(JAR_SUFFIX):
                candidate = Path(root) / name
                if candidate.is_file():
                    jars.append(candidate)
    return sorted(jars)


def find_manifest_entry(
    zip_file: zipfile.ZipFile, manifest_name: str
) -> zipfile.ZipInfo | None:
    """
    Finds the manifest inside an archive.

    The archive root is checked first; after that the first entry in any
    sub-folder whose final path component equals manifest_name wins.
    """
    try:
        root_entry = zip_file.getinfo(manifest_name)
        if not root_entry.is_dir():
            return root_entry
    except KeyError:
        pass

    for entry in zip_file.infolist():
        if entry.is_dir():
            continue
        if entry.filename.rsplit("/", 1)[-1] == manifest_name:
            return entry
    return None


def read_jar_manifest(
    jar_path: Path, manifest_name: str
) -> ManifestParseResult | None:
    """
    Opens a jar and parses its embedded manifest.

    Returns None if the jar contains no manifest.

    Raises:
        InvalidArchiveError: If the file is not a readable ZIP archive.
    """
    try:
        with zipfile.ZipFile(jar_path) as jar:
            entry = find_manifest_entry(jar, manifest_name)
            if entry is None:
                return None
            log.debug(f"Reading '{entry.filename}' from {jar_path.name}")
            with jar.open(entry) as raw:
                text = io.TextIOWrapper(raw, encoding="utf-8-sig", errors="replace")
                return parse_manifest_lines(
                    text, source=f"{jar_path.name}!{entry.filename}"
                )
    except (zipfile.BadZipFile, OSError) as e:
        raise InvalidArchiveError(f"Error parsing JAR '{jar_path}': {e}") from e
