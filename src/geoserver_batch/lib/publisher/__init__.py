"""Publisher library — public API for batch shapefile publishing.

Provides shapefile discovery and sidecar grouping, zip bundle packaging, and
a GeoServer REST client for datastore uploads, feature type publishing, and
layer listing.
"""

from geoserver_batch.lib.publisher.archive import Archiver, create_bundle, run_zip
from geoserver_batch.lib.publisher.discovery import (
    ALLOWED_SUFFIXES,
    REQUIRED_SUFFIXES,
    discover_shapefiles,
    gather_components,
)
from geoserver_batch.lib.publisher.errors import (
    ConfigurationError,
    FileSystemError,
    GeoServerBatchError,
    GeoServerError,
    LayerListingError,
    MissingComponentError,
    PackagingError,
    PublishError,
    UploadError,
)
from geoserver_batch.lib.publisher.geoserver import GeoServerClient
from geoserver_batch.lib.publisher.layers import build_wfs_url, extract_layer_name, list_published_layers
from geoserver_batch.lib.publisher.types import (
    BatchResult,
    ComponentSet,
    Credentials,
    Dataset,
    DatasetReport,
    DatasetStatus,
    FeatureTypeEntry,
    GeoServerConnection,
    PublishOutcome,
    PublishResult,
    PublishTarget,
    sanitize_name,
)

__all__ = [
    "ALLOWED_SUFFIXES",
    "REQUIRED_SUFFIXES",
    "Archiver",
    "BatchResult",
    "ComponentSet",
    "ConfigurationError",
    "Credentials",
    "Dataset",
    "DatasetReport",
    "DatasetStatus",
    "FeatureTypeEntry",
    "FileSystemError",
    "GeoServerBatchError",
    "GeoServerClient",
    "GeoServerConnection",
    "GeoServerError",
    "LayerListingError",
    "MissingComponentError",
    "PackagingError",
    "PublishError",
    "PublishOutcome",
    "PublishResult",
    "PublishTarget",
    "UploadError",
    "build_wfs_url",
    "create_bundle",
    "discover_shapefiles",
    "extract_layer_name",
    "gather_components",
    "list_published_layers",
    "run_zip",
    "sanitize_name",
]
