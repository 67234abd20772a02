"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResolvePolicy(str, Enum):
    """
    What to do when an identifier cannot be parsed or its album/playlist
    cannot be fetched.
    """

    ABORT = "abort"  # fail the whole batch, no partial result
    SKIP = "skip"  # warn and continue with the next identifier


class DownloadConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Authentication
    access_token: str = Field("", validate_default=True)

    # Output Settings
    destination: str = "."
    parallel: int = 5
    on_error: ResolvePolicy = ResolvePolicy.ABORT

    # Tagging and File Options
    embed_cover: bool = True
    rename: bool = True

    # Internal fields not loaded from INI file
    config_path: str = Field(..., repr=False)
    identifiers: list[str] = Field(default_factory=list, repr=False)

    @field_validator("access_token")
    @classmethod
    def validate_access_token(cls, v: str) -> str:
        """Ensures an access token is configured."""
        if not v:
            raise ValueError(
                "Access token is required. Run 'spotify-dl init <TOKEN>' or pass "
                "--access-token."
            )
        if any(c.isspace() for c in v):
            raise ValueError("Access token cannot contain whitespace.")
        return v

    @field_validator("parallel")
    @classmethod
    def validate_parallel(cls, v: int) -> int:
        """Ensures a reasonable number of concurrent metadata fetches."""
        if v < 1 or v > 32:
            raise ValueError("Parallel must be between 1 and 32.")
        return v

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if not v:
            raise ValueError("Destination cannot be empty.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path", "identifiers"}
        return {key for key in cls.model_fields if key not in internal_fields}
