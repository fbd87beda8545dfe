"""Batch publish service — drives discovery, packaging, upload, and publish.

Datasets are processed strictly one at a time in discovery order.  Failures
are isolated per dataset: each one is logged with its path relative to the
scan root, recorded in the batch result, and the loop moves on.  Bundles are
always deleted after their dataset; the shared temp directory is removed at
the end of the run.
"""

from __future__ import annotations

import shutil
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from geoserver_batch.lib.publisher.archive import create_bundle, run_zip
from geoserver_batch.lib.publisher.discovery import discover_shapefiles, gather_components
from geoserver_batch.lib.publisher.errors import MissingComponentError, PackagingError, UploadError
from geoserver_batch.lib.publisher.types import (
    BatchResult,
    Dataset,
    DatasetReport,
    DatasetStatus,
    PublishOutcome,
    PublishTarget,
)

if TYPE_CHECKING:
    from geoserver_batch.lib.publisher.archive import Archiver
    from geoserver_batch.lib.publisher.geoserver import GeoServerClient

_TEMP_PREFIX = "geoserver-shp-"

_OUTCOME_STATUS = {
    PublishOutcome.CREATED: DatasetStatus.CREATED,
    PublishOutcome.UPDATED: DatasetStatus.UPDATED,
    PublishOutcome.SKIPPED: DatasetStatus.SKIPPED,
    PublishOutcome.FAILED: DatasetStatus.FAILED,
}


@dataclass(frozen=True)
class PublishOptions:
    """Run-wide publishing options.

    Attributes:
        store_prefix: Prefix for every datastore name.
        layer_prefix: Prefix for every layer name.
        overwrite: Replace existing stores and layers instead of skipping.
        temp_parent: Parent directory for the run's temp directory
            (system default when None).
    """

    store_prefix: str = ""
    layer_prefix: str = ""
    overwrite: bool = False
    temp_parent: Path | None = None


async def publish_shapefiles(
    root: Path,
    client: GeoServerClient,
    options: PublishOptions | None = None,
    *,
    archiver: Archiver = run_zip,
) -> BatchResult:
    """Publish every shapefile under ``root`` to the client's workspace.

    Args:
        root: Directory scanned recursively for ``.shp`` files.
        client: Open GeoServer client bound to the target workspace.
        options: Name prefixes, overwrite flag, and temp location.
        archiver: Archiver used to build each bundle.

    Returns:
        BatchResult with one report per discovered dataset.

    Raises:
        FileSystemError: If ``root`` cannot be scanned.
    """
    options = options or PublishOptions()
    start_time = time.monotonic()
    root = Path(root).resolve()

    shapefiles = discover_shapefiles(root)
    result = BatchResult(root=root)
    if not shapefiles:
        logger.info('No ".shp" files found under {}. Nothing to do.', root)
        return result

    logger.info("Found {} shapefile(s). Starting upload...", len(shapefiles))
    temp_dir = Path(tempfile.mkdtemp(prefix=_TEMP_PREFIX, dir=options.temp_parent))

    try:
        for shp_path in shapefiles:
            dataset = Dataset(
                shp_path=shp_path,
                root=root,
                store_prefix=options.store_prefix,
                layer_prefix=options.layer_prefix,
            )
            with logger.contextualize(dataset=dataset.relative_path.as_posix(), store=dataset.store_name):
                report = await _publish_dataset(dataset, client, options, temp_dir, archiver)
            result.reports.append(report)
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    result.duration_seconds = time.monotonic() - start_time
    logger.info(
        "Finished processing shapefiles: {} published, {} skipped, {} failed in {:.1f}s",
        result.published,
        result.count(DatasetStatus.SKIPPED),
        result.failed,
        result.duration_seconds,
    )
    return result


async def _publish_dataset(
    dataset: Dataset,
    client: GeoServerClient,
    options: PublishOptions,
    temp_dir: Path,
    archiver: Archiver,
) -> DatasetReport:
    """Run group -> package -> upload -> publish for one dataset."""
    relative = dataset.relative_path
    report = DatasetReport(
        relative_path=relative,
        store_name=dataset.store_name,
        layer_name=dataset.layer_name,
        status=DatasetStatus.FAILED,
    )
    logger.info('Processing "{}" -> store "{}", layer "{}"', relative, dataset.store_name, dataset.layer_name)

    try:
        components = gather_components(dataset.shp_path)
    except MissingComponentError as exc:
        logger.error('Skipping "{}": {}', relative, exc)
        report.status = DatasetStatus.INVALID
        report.stage = "components"
        report.message = str(exc)
        return report
    except OSError as exc:
        logger.error('Skipping "{}": cannot list components: {}', relative, exc)
        report.stage = "components"
        report.message = str(exc)
        return report

    bundle_name = f"{dataset.store_name}-{time.time_ns() // 1_000_000}"
    try:
        bundle = create_bundle(components.paths, temp_dir, bundle_name, archiver=archiver)
    except (PackagingError, OSError) as exc:
        logger.error('Failed to zip shapefile "{}": {}', relative, exc)
        report.stage = "package"
        report.message = str(exc)
        _remove_bundle(temp_dir / f"{bundle_name}.zip")
        return report

    try:
        try:
            await client.upload_datastore(bundle, dataset.store_name, overwrite=options.overwrite)
        except (UploadError, OSError) as exc:
            logger.error('Failed for "{}": {}', relative, exc)
            report.stage = "upload"
            report.message = str(exc)
            return report

        target = PublishTarget(
            workspace=client.workspace,
            store_name=dataset.store_name,
            layer_name=dataset.layer_name,
            native_name=dataset.native_name,
        )
        publish = await client.publish_layer(target, overwrite=options.overwrite)
        report.status = _OUTCOME_STATUS[publish.outcome]

        if publish.outcome is PublishOutcome.FAILED:
            logger.error('Failed for "{}": {}', relative, publish.error)
            report.stage = "publish"
            report.message = str(publish.error)
        elif publish.outcome is PublishOutcome.SKIPPED:
            report.message = f'Layer "{dataset.layer_name}" already exists'
        else:
            logger.info('Published layer "{}" ({})', dataset.layer_name, publish.outcome)
        return report
    finally:
        _remove_bundle(bundle)


def _remove_bundle(path: Path) -> None:
    """Delete a bundle file; failures are logged, never raised."""
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove bundle {}: {}", path, exc)
