"""Shapefile discovery and sidecar grouping.

A dataset is anchored by its ``.shp`` file; its components are the siblings
whose lowercase name is exactly the lowercase base name followed by one of the
allow-listed suffixes.  Matching on the full name keeps ``lake_2.shp`` out of
the ``lake`` dataset.
"""

from pathlib import Path

from loguru import logger

from geoserver_batch.lib.publisher.errors import FileSystemError, MissingComponentError
from geoserver_batch.lib.publisher.types import ComponentSet

PRIMARY_SUFFIX = ".shp"

ALLOWED_SUFFIXES: tuple[str, ...] = (
    ".shp",
    ".shx",
    ".dbf",
    ".prj",
    ".cpg",
    ".sbn",
    ".sbx",
    ".qix",
    ".qpj",
    ".fix",
    ".aih",
    ".ain",
    ".shp.xml",
    ".qmd",
)

REQUIRED_SUFFIXES: tuple[str, ...] = (".shp", ".shx", ".dbf")


def discover_shapefiles(root: Path) -> list[Path]:
    """Recursively find every ``.shp`` file under ``root``.

    Entries are visited in sorted name order so the result is stable for a
    given directory snapshot. Symbolic links, to files or directories, are
    skipped rather than followed.

    Args:
        root: Directory to scan.

    Returns:
        Absolute paths of the primary files, in traversal order.

    Raises:
        FileSystemError: If ``root`` is missing, not a directory, or unreadable.
    """
    root = Path(root)
    if not root.exists():
        msg = f"Directory not found: {root}"
        raise FileSystemError(msg)
    if not root.is_dir():
        msg = f"Not a directory: {root}"
        raise FileSystemError(msg)

    found: list[Path] = []
    try:
        _walk(root.resolve(), found)
    except OSError as exc:
        msg = f"Cannot read directory {root}: {exc}"
        raise FileSystemError(msg) from exc
    return found


def _walk(directory: Path, found: list[Path]) -> None:
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.is_symlink():
            continue
        if entry.is_dir():
            _walk(entry, found)
        elif entry.is_file() and entry.name.lower().endswith(PRIMARY_SUFFIX):
            found.append(entry)


def gather_components(shp_path: Path) -> ComponentSet:
    """Collect the sidecar files that belong to one shapefile.

    Args:
        shp_path: Path to the primary ``.shp`` file.

    Returns:
        ComponentSet keyed by lowercase suffix, in allow-list order.

    Raises:
        MissingComponentError: If ``.shp``, ``.shx`` or ``.dbf`` is absent.
    """
    directory = shp_path.parent
    base_lower = shp_path.stem.lower()

    matches: dict[str, Path] = {}
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if not entry.is_file():
            continue
        suffix = _component_suffix(entry.name.lower(), base_lower)
        if suffix is None:
            continue
        if suffix in matches:
            logger.warning(
                "Ignoring {}: {} already provides {} for {}",
                entry.name,
                matches[suffix].name,
                suffix,
                shp_path.name,
            )
            continue
        matches[suffix] = entry

    for required in REQUIRED_SUFFIXES:
        if required not in matches:
            raise MissingComponentError(required, shp_path)

    ordered = {suffix: matches[suffix] for suffix in ALLOWED_SUFFIXES if suffix in matches}
    return ComponentSet(shp_path=shp_path, files=ordered)


def _component_suffix(name_lower: str, base_lower: str) -> str | None:
    """Return the allow-listed suffix if ``name_lower`` is base + suffix."""
    if not name_lower.startswith(base_lower):
        return None
    suffix = name_lower[len(base_lower) :]
    return suffix if suffix in ALLOWED_SUFFIXES else None
