"""
Provides methods for checking the integrity of downloaded archive files.
"""

import logging
import zipfile

log = logging.getLogger(__name__)

ZIP_SUFFIXES = (".jar", ".zip", ".war", ".ear")


class ArchiveIntegrityChecker:
    """A collection of static methods for validating downloaded archives."""

    @staticmethod
    def applies_to(file_name: str) -> bool:
        """Only ZIP-family files can be checked."""
        return file_name.lower().endswith(ZIP_SUFFIXES)

    @staticmethod
    def check_zip(filepath: str) -> bool:
        """
        Performs an integrity check on a ZIP-family archive (jar, war, ...).

        Reads every member and compares its CRC, so a truncated or corrupted
        transfer is caught before the file is moved into place.

        Args:
            filepath: Path to the archive.

        Returns:
            True if the archive is readable and all CRCs match, False otherwise.
        """
        try:
            with zipfile.ZipFile(filepath) as archive:
                bad_member = archive.testzip()
            if bad_member is not None:
                log.warning(
                    f"Archive integrity check failed for '{filepath}': "
                    f"bad CRC in '{bad_member}'."
                )
                return False
            return True
        except zipfile.BadZipFile:
            log.warning(
                f"Archive integrity check failed for '{filepath}': Not a ZIP archive."
            )
            return False
        except Exception as e:
            log.debug(f"Archive check failed for '{filepath}' with unexpected error: {e}")
            return False
