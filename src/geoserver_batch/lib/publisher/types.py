"""Publisher data types.

Dataclasses for discovered datasets, GeoServer connection details, publish
targets and the outcomes reported by the publish workflow.
"""

import base64
import re
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from geoserver_batch.lib.publisher.errors import ConfigurationError, GeoServerError

_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_name(name: str) -> str:
    """Trim a name and collapse each whitespace run into a single underscore."""
    return _WHITESPACE_RE.sub("_", name.strip())


@dataclass(frozen=True)
class Credentials:
    """GeoServer REST credentials.  The password never appears in ``repr``."""

    username: str
    password: str = field(repr=False)

    def authorization_header(self) -> str:
        """Build the HTTP Basic ``Authorization`` header value."""
        token = base64.b64encode(f"{self.username}:{self.password}".encode()).decode("ascii")
        return f"Basic {token}"


@dataclass(frozen=True)
class GeoServerConnection:
    """Everything needed to talk to one GeoServer workspace."""

    base_url: str
    workspace: str
    credentials: Credentials

    @classmethod
    def from_values(
        cls,
        base_url: str | None,
        workspace: str | None,
        username: str | None,
        password: str | None,
    ) -> "GeoServerConnection":
        """Validate raw settings and build a connection.

        Raises:
            ConfigurationError: If any value is missing or empty.
        """
        if not base_url or not base_url.rstrip("/"):
            msg = 'Missing GeoServer URL. Provide "--geoserver-url" or set GEOSERVER_URL.'
            raise ConfigurationError(msg)
        if not workspace:
            msg = 'Missing workspace. Provide "--workspace" or set GEOSERVER_WORKSPACE.'
            raise ConfigurationError(msg)
        if not username:
            msg = 'Missing username. Provide "--username" or set GEOSERVER_USER.'
            raise ConfigurationError(msg)
        if not password:
            msg = 'Missing password. Provide "--password" or set GEOSERVER_PASSWORD.'
            raise ConfigurationError(msg)
        return cls(
            base_url=base_url.rstrip("/"),
            workspace=workspace,
            credentials=Credentials(username=username, password=password),
        )


@dataclass(frozen=True)
class Dataset:
    """One shapefile dataset anchored by its ``.shp`` file.

    Attributes:
        shp_path: Absolute path of the primary file.
        root: Directory the dataset was discovered under.
        store_prefix: Prefix for the datastore name.
        layer_prefix: Prefix for the layer name.
    """

    shp_path: Path
    root: Path
    store_prefix: str = ""
    layer_prefix: str = ""

    @property
    def base_name(self) -> str:
        return self.shp_path.stem

    @property
    def native_name(self) -> str:
        """Trimmed but unsanitized base name, used as the queryable native name."""
        return self.base_name.strip()

    @property
    def store_name(self) -> str:
        return f"{self.store_prefix}{sanitize_name(self.base_name)}"

    @property
    def layer_name(self) -> str:
        return f"{self.layer_prefix}{sanitize_name(self.base_name)}"

    @property
    def relative_path(self) -> Path:
        try:
            return self.shp_path.relative_to(self.root)
        except ValueError:
            return self.shp_path


@dataclass(frozen=True)
class ComponentSet:
    """Allow-listed sidecar files of one dataset, keyed by lowercase suffix."""

    shp_path: Path
    files: dict[str, Path]

    @property
    def paths(self) -> list[Path]:
        """Component paths in allow-list order."""
        return list(self.files.values())

    def __contains__(self, suffix: object) -> bool:
        return suffix in self.files


@dataclass(frozen=True)
class PublishTarget:
    """Where a dataset ends up on GeoServer."""

    workspace: str
    store_name: str
    layer_name: str
    native_name: str

    def feature_type_payload(self) -> dict[str, dict[str, object]]:
        """JSON body for the feature type create/update requests."""
        return {
            "featureType": {
                "name": self.layer_name,
                "nativeName": self.native_name,
                "enabled": True,
            }
        }


class PublishOutcome(StrEnum):
    """Terminal state of the feature type publish sequence."""

    CREATED = "created"
    SKIPPED = "skipped"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass
class PublishResult:
    """Outcome of ``GeoServerClient.publish_layer``."""

    outcome: PublishOutcome
    target: PublishTarget
    error: GeoServerError | None = None

    @property
    def published(self) -> bool:
        return self.outcome in (PublishOutcome.CREATED, PublishOutcome.UPDATED)

    def raise_for_failure(self) -> None:
        """Raise the stored error when the outcome is ``FAILED``."""
        if self.outcome is PublishOutcome.FAILED and self.error is not None:
            raise self.error


class DatasetStatus(StrEnum):
    """Per-dataset status recorded by the batch driver."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    INVALID = "invalid"
    FAILED = "failed"


@dataclass
class DatasetReport:
    """What happened to one dataset during a batch run.

    Attributes:
        relative_path: Dataset path relative to the scan root.
        store_name: Datastore name derived from the base name.
        layer_name: Layer name derived from the base name.
        status: Final status of the dataset.
        stage: Step that failed (``components``, ``package``, ``upload``,
            ``publish``), or None when nothing failed.
        message: Error or skip message, if any.
    """

    relative_path: Path
    store_name: str
    layer_name: str
    status: DatasetStatus
    stage: str | None = None
    message: str | None = None


@dataclass
class BatchResult:
    """Aggregate result of a batch publish run."""

    root: Path
    reports: list[DatasetReport] = field(default_factory=list)
    duration_seconds: float = 0.0

    def count(self, status: DatasetStatus) -> int:
        return sum(1 for r in self.reports if r.status is status)

    @property
    def published(self) -> int:
        return self.count(DatasetStatus.CREATED) + self.count(DatasetStatus.UPDATED)

    @property
    def failed(self) -> int:
        return self.count(DatasetStatus.FAILED) + self.count(DatasetStatus.INVALID)


@dataclass(frozen=True)
class FeatureTypeEntry:
    """A published feature type and its WFS GetFeature URL."""

    layer: str
    wfs_url: str
    title: str | None = None
