"""Published layer listing and WFS endpoint derivation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import unquote, urlsplit

import httpx

from geoserver_batch.lib.publisher.types import FeatureTypeEntry

if TYPE_CHECKING:
    from geoserver_batch.lib.publisher.geoserver import GeoServerClient

DEFAULT_MAX_FEATURES = 1000


def extract_layer_name(feature_type: dict[str, Any]) -> str:
    """Determine a layer name from a feature type listing entry.

    Uses ``name`` when present, otherwise the last path segment of ``href``
    without its extension.

    Raises:
        ValueError: If neither field yields a name.
    """
    name = feature_type.get("name")
    if isinstance(name, str) and name:
        return name

    href = feature_type.get("href")
    if isinstance(href, str) and href:
        last_segment = urlsplit(href).path.rsplit("/", 1)[-1]
        stem = last_segment.rsplit(".", 1)[0] if "." in last_segment else last_segment
        if stem:
            return unquote(stem)

    msg = "Unable to determine layer name from feature type payload."
    raise ValueError(msg)


def build_wfs_url(base_url: str, workspace: str, layer_name: str, max_features: int = DEFAULT_MAX_FEATURES) -> str:
    """Build a WFS 2.0.0 GetFeature URL returning GeoJSON for one layer."""
    params = {
        "service": "WFS",
        "version": "2.0.0",
        "request": "GetFeature",
        "typeNames": f"{workspace}:{layer_name}",
        "outputFormat": "application/json",
        "maxFeatures": str(max_features),
    }
    return str(httpx.URL(f"{base_url.rstrip('/')}/wfs", params=params))


async def list_published_layers(
    client: GeoServerClient,
    max_features: int = DEFAULT_MAX_FEATURES,
) -> list[FeatureTypeEntry]:
    """List the workspace's feature types with their WFS URLs.

    Raises:
        LayerListingError: If GeoServer rejects the listing request.
        ValueError: If an entry carries neither a name nor an href.
    """
    entries: list[FeatureTypeEntry] = []
    for feature_type in await client.list_feature_types():
        layer_name = extract_layer_name(feature_type)
        title = feature_type.get("title")
        entries.append(
            FeatureTypeEntry(
                layer=f"{client.workspace}:{layer_name}",
                wfs_url=build_wfs_url(client.base_url, client.workspace, layer_name, max_features),
                title=title if isinstance(title, str) else None,
            )
        )
    return entries
