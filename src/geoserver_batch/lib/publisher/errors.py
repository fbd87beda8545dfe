"""Error types raised by the publisher library.

Fatal errors (``ConfigurationError``, ``FileSystemError``) abort a run.
Everything else is scoped to a single dataset and is caught by the batch
driver, which reports it and moves on to the next dataset.
"""

from pathlib import Path


class GeoServerBatchError(Exception):
    """Base class for all publisher errors."""


class ConfigurationError(GeoServerBatchError):
    """Raised when required connection settings are missing."""


class FileSystemError(GeoServerBatchError):
    """Raised when the scan root is missing, not a directory, or unreadable."""


class MissingComponentError(GeoServerBatchError):
    """Raised when a dataset lacks one of its mandatory sidecar files.

    Args:
        suffix: The missing component suffix (e.g. ``.dbf``).
        shp_path: The primary file whose dataset is incomplete.
    """

    def __init__(self, suffix: str, shp_path: Path) -> None:
        self.suffix = suffix
        self.shp_path = shp_path
        super().__init__(f'Missing required "{suffix}" file for shapefile "{shp_path}".')


class PackagingError(GeoServerBatchError):
    """Raised when the archiver is unavailable or fails to build a bundle."""


class GeoServerError(GeoServerBatchError):
    """Raised when a GeoServer REST call fails.

    Args:
        message: Human-readable error description.
        status_code: HTTP status code, or None for transport failures.
        body: Response body returned by GeoServer, if any.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        self.message = message
        self.status_code = status_code
        self.body = body
        detail = message
        if status_code is not None:
            detail += f" Status {status_code}."
        if body:
            detail += f" Response: {body}"
        super().__init__(detail)


class UploadError(GeoServerError):
    """Datastore upload returned a non-2xx response or never completed."""


class PublishError(GeoServerError):
    """Feature type create or update failed."""


class LayerListingError(GeoServerError):
    """Feature type listing for a workspace failed."""
