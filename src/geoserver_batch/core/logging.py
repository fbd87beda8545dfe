"""Loguru logging configuration.

Human-readable stderr output with an opt-in JSON sink for records bound with
``json_output=True``.  Optionally writes to a rotating log file when a
``log_dir`` is provided.

Records emitted while a dataset is being published carry ``dataset`` and
``store`` in their extras (see ``services.publish_service``); the text format
appends the dataset path and the JSON sink serializes both fields.
"""

import sys
from pathlib import Path

from loguru import logger

_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | {message}"
_DATASET_SUFFIX = " | dataset={extra[dataset]}"


def _format(record: dict) -> str:
    """Pick the text format for a record, adding the dataset when bound."""
    if "dataset" in record["extra"]:
        return _LOG_FORMAT + _DATASET_SUFFIX + "\n{exception}"
    return _LOG_FORMAT + "\n{exception}"


def setup_logging(log_level: str = "INFO", log_dir: str | None = None) -> None:
    """Configure Loguru sinks for CLI runs.

    Args:
        log_level: Minimum log level to emit.
        log_dir: Optional directory for log files.  When set, a rotating
            file sink is added (rotated every 24 hours, retained 7 days).
    """
    level = log_level.upper()
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=_format,
        filter=lambda record: not record["extra"].get("json_output", False),
    )
    logger.add(
        sys.stderr,
        level=level,
        serialize=True,
        filter=lambda record: record["extra"].get("json_output", False),
    )

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / "geoserver-batch.log",
            level=level,
            format=_format,
            rotation="24h",
            retention="7 days",
        )
