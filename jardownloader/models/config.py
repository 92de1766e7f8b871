"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MANIFEST_NAME = "dependencies.txt"


class DownloadConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Download Settings
    max_workers: int = 4
    max_attempts: int = 3
    retry_delay: float = 1.5
    manifest_name: str = DEFAULT_MANIFEST_NAME

    # Behavior Options
    verify_archives: bool = True
    download_archive: bool = False
    dry_run: bool = False

    # Internal fields not loaded from INI file
    config_path: str = Field(..., repr=False)
    download_dir: str = Field(".", repr=False)

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Ensures a reasonable number of workers."""
        if v < 1 or v > 32:
            raise ValueError("Max workers must be between 1 and 32.")
        return v

    @field_validator("max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1 or v > 10:
            raise ValueError("Max attempts must be between 1 and 10.")
        return v

    @field_validator("retry_delay")
    @classmethod
    def validate_retry_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Retry delay cannot be negative.")
        return v

    @field_validator("manifest_name")
    @classmethod
    def validate_manifest_name(cls, v: str) -> str:
        """The manifest name is matched against entry names, so it must be bare."""
        if not v:
            raise ValueError("Manifest name cannot be empty.")
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(
                f"Manifest name must be a plain file name, but got: {v!r}"
            )
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path", "download_dir", "dry_run"}
        return {key for key in cls.model_fields if key not in internal_fields}
