"""Layers CLI command — list published feature types with their WFS URLs.

Output is always a single JSON document on stdout so the command can be
consumed by scripts.
"""

import asyncio
import json
from typing import Any

import typer


def layers(
    geoserver_url: str | None = typer.Option(None, "--geoserver-url", help="GeoServer base URL [env: GEOSERVER_URL]"),
    workspace: str | None = typer.Option(None, "--workspace", help="Workspace to list [env: GEOSERVER_WORKSPACE]"),
    username: str | None = typer.Option(None, "--username", help="REST API username [env: GEOSERVER_USER]"),
    password: str | None = typer.Option(None, "--password", help="REST API password [env: GEOSERVER_PASSWORD]"),
    max_features: int | None = typer.Option(
        None, "--max-features", min=1, help="maxFeatures for generated WFS URLs [env: WFS_MAX_FEATURES]"
    ),
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print the JSON output"),
) -> None:
    """Print the workspace's published layers and their WFS GetFeature URLs as JSON."""
    asyncio.run(
        _layers(
            geoserver_url=geoserver_url,
            workspace=workspace,
            username=username,
            password=password,
            max_features=max_features,
            pretty=pretty,
        )
    )


async def _layers(
    *,
    geoserver_url: str | None,
    workspace: str | None,
    username: str | None,
    password: str | None,
    max_features: int | None,
    pretty: bool,
) -> None:
    """Async implementation of the layers command."""
    from geoserver_batch.core.config import get_settings
    from geoserver_batch.lib.publisher.errors import GeoServerBatchError
    from geoserver_batch.lib.publisher.geoserver import GeoServerClient
    from geoserver_batch.lib.publisher.layers import list_published_layers
    from geoserver_batch.lib.publisher.types import GeoServerConnection

    settings = get_settings()
    try:
        connection = GeoServerConnection.from_values(
            geoserver_url or settings.geoserver_url,
            workspace or settings.geoserver_workspace,
            username or settings.geoserver_user,
            password or settings.geoserver_password,
        )
        async with GeoServerClient(connection, timeout=settings.geoserver_timeout) as client:
            entries = await list_published_layers(client, max_features or settings.wfs_max_features)
    except (GeoServerBatchError, ValueError) as exc:
        _emit({"success": False, "error": str(exc), "data": None}, pretty=pretty)
        raise typer.Exit(code=1) from exc

    if not entries:
        _emit(
            {
                "success": True,
                "message": f'Workspace "{connection.workspace}" has no published feature types.',
                "data": [],
            },
            pretty=pretty,
        )
        return

    data: list[dict[str, Any]] = []
    for entry in entries:
        item: dict[str, Any] = {"layer": entry.layer, "wfsUrl": entry.wfs_url}
        if entry.title is not None:
            item["title"] = entry.title
        data.append(item)

    _emit(
        {
            "success": True,
            "count": len(entries),
            "message": f"Found {len(entries)} published feature type(s)",
            "data": data,
        },
        pretty=pretty,
    )


def _emit(payload: dict[str, Any], *, pretty: bool) -> None:
    typer.echo(json.dumps(payload, indent=2 if pretty else None, ensure_ascii=False))
