"""GeoServer REST client for datastore uploads and feature type publishing.

One ``httpx.AsyncClient`` is opened per run with the Basic auth header built
once from the connection credentials.  Requests are awaited one at a time.

Publishing follows a create-then-update protocol: the feature type is POSTed
to the store; a 409 means the layer already exists, in which case it is
either skipped or, with ``overwrite``, PUT to its existing resource.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
from loguru import logger

from geoserver_batch.lib.publisher.errors import LayerListingError, PublishError, UploadError
from geoserver_batch.lib.publisher.types import PublishOutcome, PublishResult, PublishTarget

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

    from geoserver_batch.lib.publisher.types import GeoServerConnection

DEFAULT_TIMEOUT = 300.0
RECALCULATE_PARAMS = {"recalculate": "nativebbox,latlonbbox"}
LISTING_PARAMS = {"count": "10000", "startIndex": "0"}


def _segment(value: str) -> str:
    """Percent-encode a single URL path segment."""
    return quote(value, safe="")


class GeoServerClient:
    """Async client bound to one GeoServer workspace.

    Use as an async context manager::

        async with GeoServerClient(connection) as client:
            await client.upload_datastore(bundle, "parcels")
            result = await client.publish_layer(target)

    Args:
        connection: Base URL, workspace, and credentials.
        timeout: Per-request timeout in seconds.
    """

    def __init__(self, connection: GeoServerConnection, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._connection = connection
        self._timeout = timeout
        self._auth_header = connection.credentials.authorization_header()
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._connection.base_url

    @property
    def workspace(self) -> str:
        return self._connection.workspace

    async def __aenter__(self) -> GeoServerClient:
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            headers={"Authorization": self._auth_header},
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "GeoServerClient must be used as an async context manager"
            raise RuntimeError(msg)
        return self._client

    def _workspace_url(self) -> str:
        return f"{self.base_url}/rest/workspaces/{_segment(self.workspace)}"

    def _store_url(self, store_name: str) -> str:
        return f"{self._workspace_url()}/datastores/{_segment(store_name)}"

    async def upload_datastore(self, bundle: Path, store_name: str, *, overwrite: bool = False) -> None:
        """Create (or overwrite) a shapefile datastore from a zip bundle.

        The layer is not auto-configured; publishing is a separate step.

        Args:
            bundle: Zip archive containing the shapefile components.
            store_name: Target datastore name.
            overwrite: Replace the contents of an existing store.

        Raises:
            UploadError: On a non-2xx response or transport failure.
        """
        params = {"charset": "UTF-8", "configure": "none"}
        if overwrite:
            params["update"] = "overwrite"

        content = bundle.read_bytes()
        url = f"{self._store_url(store_name)}/file.shp"
        logger.debug("Uploading {} ({} bytes) to datastore {}", bundle.name, len(content), store_name)

        try:
            response = await self._http.put(
                url,
                params=params,
                content=content,
                headers={"Content-Type": "application/zip"},
            )
        except httpx.HTTPError as exc:
            msg = f'Upload failed for datastore "{store_name}": {exc}'
            raise UploadError(msg) from exc

        if not response.is_success:
            raise UploadError(
                f'Upload failed for datastore "{store_name}".',
                status_code=response.status_code,
                body=response.text,
            )

    async def publish_layer(self, target: PublishTarget, *, overwrite: bool = False) -> PublishResult:
        """Create the feature type, or resolve a conflict with an existing one.

        Args:
            target: Store, layer, and native names to publish.
            overwrite: Update the layer when it already exists instead of skipping.

        Returns:
            PublishResult tagged CREATED, SKIPPED, UPDATED, or FAILED.
        """
        payload = target.feature_type_payload()
        create_url = f"{self._store_url(target.store_name)}/featuretypes"

        try:
            response = await self._http.post(create_url, params=RECALCULATE_PARAMS, json=payload)
        except httpx.HTTPError as exc:
            error = PublishError(f'Failed to publish layer "{target.layer_name}": {exc}')
            return PublishResult(PublishOutcome.FAILED, target, error)

        if response.is_success:
            return PublishResult(PublishOutcome.CREATED, target)

        if response.status_code != httpx.codes.CONFLICT:
            error = PublishError(
                f'Failed to publish layer "{target.layer_name}".',
                status_code=response.status_code,
                body=response.text,
            )
            return PublishResult(PublishOutcome.FAILED, target, error)

        if not overwrite:
            logger.warning(
                'Layer "{}" already exists in workspace "{}". Skipping publish (use --overwrite to replace).',
                target.layer_name,
                target.workspace,
            )
            return PublishResult(PublishOutcome.SKIPPED, target)

        return await self._update_layer(target, payload)

    async def _update_layer(self, target: PublishTarget, payload: dict[str, Any]) -> PublishResult:
        update_url = f"{self._store_url(target.store_name)}/featuretypes/{_segment(target.layer_name)}"
        try:
            response = await self._http.put(update_url, params=RECALCULATE_PARAMS, json=payload)
        except httpx.HTTPError as exc:
            error = PublishError(f'Failed to update existing layer "{target.layer_name}": {exc}')
            return PublishResult(PublishOutcome.FAILED, target, error)

        if response.is_success:
            return PublishResult(PublishOutcome.UPDATED, target)

        error = PublishError(
            f'Failed to update existing layer "{target.layer_name}".',
            status_code=response.status_code,
            body=response.text,
        )
        return PublishResult(PublishOutcome.FAILED, target, error)

    async def list_feature_types(self) -> list[dict[str, Any]]:
        """Fetch the raw feature type entries of the workspace.

        A 404 (unknown or empty workspace) yields an empty list.

        Raises:
            LayerListingError: On any other non-2xx response or transport failure.
        """
        url = f"{self._workspace_url()}/featuretypes.json"
        try:
            response = await self._http.get(url, params=LISTING_PARAMS, headers={"Accept": "application/json"})
        except httpx.HTTPError as exc:
            msg = f'Failed to fetch feature types for workspace "{self.workspace}": {exc}'
            raise LayerListingError(msg) from exc

        if response.status_code == httpx.codes.NOT_FOUND:
            return []

        if not response.is_success:
            raise LayerListingError(
                f'Failed to fetch feature types for workspace "{self.workspace}".',
                status_code=response.status_code,
                body=response.text,
            )

        return _feature_type_items(response.json())


def _feature_type_items(payload: Any) -> list[dict[str, Any]]:
    """Normalize ``featureTypes.featureType`` into a list of dicts.

    GeoServer returns a list, a single object, or an empty string for an
    empty workspace.
    """
    if not isinstance(payload, dict):
        return []
    container = payload.get("featureTypes")
    if not isinstance(container, dict):
        return []
    raw = container.get("featureType")
    if isinstance(raw, list):
        return [item for item in raw if isinstance(item, dict)]
    if isinstance(raw, dict):
        return [raw]
    return []
