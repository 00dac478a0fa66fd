"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class CoubArchiverError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(CoubArchiverError):
    """Raised for issues related to configuration loading or validation."""


class CatalogError(CoubArchiverError):
    """
    Raised when the catalog listing cannot be loaded, or when a clip's directory
    or metadata files cannot be written. Always fatal to the run.
    """


class AssetFetchError(CoubArchiverError):
    """Raised when a single asset cannot be fetched or written to disk."""

    def __init__(self, url: str, path: str, cause: BaseException | str):
        self.url = url
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to fetch '{url}' to '{path}': {cause}")


class GroupAbortError(CoubArchiverError):
    """
    Raised inside a strict image or frame group when one version fails,
    stopping the remaining versions of that group only.
    """

    def __init__(self, group: str, error: AssetFetchError, result=None):
        self.group = group
        self.error = error
        self.result = result
        super().__init__(f"Group '{group}' aborted: {error}")
