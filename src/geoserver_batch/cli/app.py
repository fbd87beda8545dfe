"""Typer CLI root application."""

import typer

from geoserver_batch.core.config import get_settings
from geoserver_batch.core.logging import setup_logging

app = typer.Typer(name="geoserver-batch", help="Batch-publish shapefiles to GeoServer")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


def _register_subcommands() -> None:
    """Register all CLI commands."""
    from geoserver_batch.cli.layers_cmd import layers
    from geoserver_batch.cli.publish_cmd import publish

    app.command("publish")(publish)
    app.command("layers")(layers)


_register_subcommands()
