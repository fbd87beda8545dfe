"""Bundle packaging via an external archiver.

The default archiver shells out to ``zip -j`` so that every component lands
at the root of the archive, which is the layout GeoServer's shapefile upload
expects.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from loguru import logger

from geoserver_batch.lib.publisher.errors import PackagingError

if TYPE_CHECKING:
    from collections.abc import Sequence

ZIP_EXECUTABLE = "zip"


class Archiver(Protocol):
    """Builds a flat zip at ``destination`` from ``sources``; raises PackagingError on failure."""

    def __call__(self, destination: Path, sources: Sequence[Path], workdir: Path) -> None: ...


def run_zip(destination: Path, sources: Sequence[Path], workdir: Path) -> None:
    """Run ``zip -j`` and raise on a missing executable or non-zero exit.

    Args:
        destination: Archive path to create.
        sources: Files to add, stored without their directories.
        workdir: Working directory for the subprocess.

    Raises:
        PackagingError: If ``zip`` is not installed or exits non-zero.
    """
    executable = shutil.which(ZIP_EXECUTABLE)
    if executable is None:
        msg = f'Archiver "{ZIP_EXECUTABLE}" not found on PATH'
        raise PackagingError(msg)

    try:
        result = subprocess.run(  # noqa: S603
            [executable, "-j", str(destination), *(str(s) for s in sources)],
            cwd=workdir,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        msg = f"Failed to run {ZIP_EXECUTABLE}: {exc}"
        raise PackagingError(msg) from exc

    if result.returncode != 0:
        detail = result.stderr.strip() or result.stdout.strip() or f"exit code {result.returncode}"
        raise PackagingError(detail)


def create_bundle(
    paths: Sequence[Path],
    dest_dir: Path,
    name: str,
    *,
    archiver: Archiver = run_zip,
) -> Path:
    """Package component files into ``dest_dir/<name>.zip``.

    Any existing file at the destination is removed first.

    Args:
        paths: Absolute component paths, in the order they should be added.
        dest_dir: Directory for the archive; created if missing.
        name: Archive file name without the ``.zip`` extension.
        archiver: Callable that builds the archive.

    Returns:
        Path of the created archive.

    Raises:
        PackagingError: If the archiver fails or produces no file.
    """
    dest_dir.mkdir(parents=True, exist_ok=True)
    zip_path = dest_dir / f"{name}.zip"
    zip_path.unlink(missing_ok=True)

    archiver(zip_path, list(paths), Path("/"))

    if not zip_path.is_file():
        msg = f"Archiver reported success but {zip_path.name} was not created"
        raise PackagingError(msg)

    logger.debug("Packaged {} files into {}", len(paths), zip_path)
    return zip_path
