"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class SpotifyDlError(Exception):
    """Base exception for all application-specific errors."""


class AuthenticationError(SpotifyDlError):
    """Raised when the Spotify API rejects the configured access token."""


class ConfigurationError(SpotifyDlError):
    """Raised for issues related to configuration loading or validation."""


class MetadataServiceError(SpotifyDlError):
    """Raised when the metadata service answers with an error or an unusable payload."""


class InvalidIdentifierError(SpotifyDlError):
    """
    Raised when a string is neither a Spotify URI nor a recognised Spotify web link.
    """

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Invalid identifier: '{identifier}'")


class CollectionFetchError(SpotifyDlError):
    """Raised when an album or playlist cannot be expanded into its tracks."""

    def __init__(self, kind: str, resource_id: str):
        self.kind = kind
        self.resource_id = resource_id
        super().__init__(f"Failed to get {kind} '{resource_id}'")


class MetadataFetchError(SpotifyDlError):
    """
    Raised when the track, one of its artists, or its album cannot be fetched
    while assembling track metadata.
    """

    def __init__(self, subject: str, resource_id: str):
        self.subject = subject
        self.resource_id = resource_id
        super().__init__(f"Failed to get {subject} '{resource_id}'")
