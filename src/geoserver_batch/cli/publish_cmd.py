"""Publish CLI command — upload every shapefile under a directory to GeoServer."""

import asyncio
from pathlib import Path

import typer
from loguru import logger

from geoserver_batch.lib.publisher.types import BatchResult, DatasetStatus

_STATUS_LABELS = {
    DatasetStatus.CREATED: ("PUBLISHED", typer.colors.GREEN),
    DatasetStatus.UPDATED: ("UPDATED", typer.colors.GREEN),
    DatasetStatus.SKIPPED: ("SKIPPED", typer.colors.YELLOW),
    DatasetStatus.INVALID: ("INVALID", typer.colors.RED),
    DatasetStatus.FAILED: ("FAILED", typer.colors.RED),
}


def publish(
    directory: Path | None = typer.Option(
        None,
        "--directory",
        "--dir",
        help="Root directory to scan for .shp files [env: GEOSERVER_SHAPEFILE_DIR]",
    ),
    geoserver_url: str | None = typer.Option(None, "--geoserver-url", help="GeoServer base URL [env: GEOSERVER_URL]"),
    workspace: str | None = typer.Option(None, "--workspace", help="Target workspace [env: GEOSERVER_WORKSPACE]"),
    username: str | None = typer.Option(None, "--username", help="REST API username [env: GEOSERVER_USER]"),
    password: str | None = typer.Option(None, "--password", help="REST API password [env: GEOSERVER_PASSWORD]"),
    store_prefix: str | None = typer.Option(None, "--store-prefix", help="Prefix for datastore names"),
    layer_prefix: str | None = typer.Option(None, "--layer-prefix", help="Prefix for layer names"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Replace existing stores and layers"),
) -> None:
    """Zip, upload, and publish every shapefile found under a directory."""
    asyncio.run(
        _publish(
            directory=directory,
            geoserver_url=geoserver_url,
            workspace=workspace,
            username=username,
            password=password,
            store_prefix=store_prefix,
            layer_prefix=layer_prefix,
            overwrite=overwrite,
        )
    )


async def _publish(
    *,
    directory: Path | None,
    geoserver_url: str | None,
    workspace: str | None,
    username: str | None,
    password: str | None,
    store_prefix: str | None,
    layer_prefix: str | None,
    overwrite: bool,
) -> None:
    """Async implementation of the publish command."""
    from geoserver_batch.core.config import get_settings
    from geoserver_batch.lib.publisher.errors import ConfigurationError, FileSystemError
    from geoserver_batch.lib.publisher.geoserver import GeoServerClient
    from geoserver_batch.lib.publisher.types import GeoServerConnection
    from geoserver_batch.services.publish_service import PublishOptions, publish_shapefiles

    settings = get_settings()
    try:
        connection = GeoServerConnection.from_values(
            geoserver_url or settings.geoserver_url,
            workspace or settings.geoserver_workspace,
            username or settings.geoserver_user,
            password or settings.geoserver_password,
        )
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}")
        raise typer.Exit(code=1) from exc

    root = directory or Path(settings.geoserver_shapefile_dir)
    options = PublishOptions(
        store_prefix=store_prefix if store_prefix is not None else settings.geoserver_store_prefix,
        layer_prefix=layer_prefix if layer_prefix is not None else settings.geoserver_layer_prefix,
        overwrite=overwrite or settings.geoserver_overwrite,
    )

    try:
        async with GeoServerClient(connection, timeout=settings.geoserver_timeout) as client:
            result = await publish_shapefiles(root, client, options)
    except FileSystemError as exc:
        logger.error("Publish aborted: {}", exc)
        typer.echo(f"Error: {exc}")
        raise typer.Exit(code=1) from exc

    _print_summary(result)


def _print_summary(result: BatchResult) -> None:
    if not result.reports:
        typer.echo(f'No ".shp" files found under {result.root}. Nothing to do.')
        return

    typer.echo(f"\nProcessed {len(result.reports)} shapefile(s):")
    for report in result.reports:
        label, color = _STATUS_LABELS[report.status]
        status = typer.style(f"{label:<9}", fg=color, bold=True)
        line = f"  {status} {report.relative_path}  ->  {report.layer_name}"
        if report.message and report.status is not DatasetStatus.SKIPPED:
            line += f"\n            {report.message}"
        typer.echo(line)

    typer.echo(
        f"\nPublished: {result.published}  Skipped: {result.count(DatasetStatus.SKIPPED)}  Failed: {result.failed}"
    )
    typer.echo(f"Duration: {result.duration_seconds:.1f}s")
