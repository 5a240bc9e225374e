"""Import, export and file storage for configurators."""

import json
import logging
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .config import STORAGE_VERSION
from .types import ConfiguratorData

logger = logging.getLogger(__name__)

STORAGE_FILENAME = "configurators.json"


class ConfiguratorImportError(ValueError):
    """Raised when an import payload is not a valid configurator export."""


def _envelope(
    configurators: List[ConfiguratorData], active_id: str, version: str
) -> dict:
    return {
        "version": version,
        "timestamp": int(time.time() * 1000),
        "configurators": [c.to_dict() for c in configurators],
        "activeConfiguratorId": active_id,
    }


def export_filename(now: Optional[datetime] = None) -> str:
    """Suggested download name, e.g. configurator-export-2024-05-01.json."""
    now = now or datetime.now()
    return f"configurator-export-{now.strftime('%Y-%m-%d')}.json"


def export_configurations(
    configurators: List[ConfiguratorData],
    active_id: str,
    version: str = STORAGE_VERSION,
) -> str:
    """Serialize configurators to the export JSON format."""
    data = _envelope(configurators, active_id, version)
    logger.info(f"Exported {len(configurators)} configurator(s)")
    return json.dumps(data, indent=2)


def import_configurations(text: str) -> Tuple[List[ConfiguratorData], str]:
    """
    Parse an export produced by export_configurations.

    Args:
        text: JSON document

    Returns:
        Tuple of (configurators, active configurator id)

    Raises:
        ConfiguratorImportError: If the document is not valid JSON or lacks
            the configurators array or the active configurator id
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfiguratorImportError(f"Invalid file format: {e}") from e

    if not isinstance(data, dict):
        raise ConfiguratorImportError("Invalid file format: expected an object")

    raw = data.get("configurators")
    if not isinstance(raw, list):
        raise ConfiguratorImportError("Invalid file format: missing configurators array")

    active_id = data.get("activeConfiguratorId")
    if not active_id:
        raise ConfiguratorImportError("Invalid file format: missing active configurator ID")

    try:
        configurators = [ConfiguratorData.from_dict(c) for c in raw]
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfiguratorImportError(f"Invalid configurator data: {e}") from e

    logger.info(f"Imported {len(configurators)} configurator(s)")
    return configurators, active_id


class ConfiguratorStore:
    """File-backed storage for the builder's configurators."""

    def __init__(self, data_dir: Optional[str] = None, version: str = STORAGE_VERSION):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding configurators.json. Defaults to
                data/configurators relative to the project root.
            version: Storage format version written and accepted on load
        """
        if data_dir is None:
            data_dir = os.path.join(
                os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
                "data",
                "configurators",
            )

        self.data_dir = Path(data_dir)
        self.version = version
        self.configurators: Dict[str, ConfiguratorData] = {}
        self.active_id: Optional[str] = None

    @property
    def path(self) -> Path:
        return self.data_dir / STORAGE_FILENAME

    def load(self) -> bool:
        """
        Load configurators from disk.

        A missing file, unreadable file or version mismatch loads nothing.

        Returns:
            True if configurators were loaded
        """
        if not self.path.exists():
            return False

        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error(f"Failed to load configurators from {self.path}: {e}")
            return False

        if not isinstance(data, dict):
            logger.error(f"Failed to load configurators from {self.path}: expected an object")
            return False

        if data.get("version") != self.version:
            logger.warning(
                f"Storage version mismatch ({data.get('version')} != {self.version}), "
                "using defaults"
            )
            return False

        try:
            configurators, active_id = import_configurations(json.dumps(data))
        except ConfiguratorImportError as e:
            logger.error(f"Stored configurators are invalid: {e}")
            return False

        self.configurators = {c.id: c for c in configurators}
        self.active_id = active_id
        logger.info(f"Loaded {len(configurators)} configurator(s) from storage")
        return True

    def save(self) -> None:
        """Write all configurators to disk."""
        os.makedirs(self.data_dir, exist_ok=True)
        data = _envelope(list(self.configurators.values()), self.active_id or "", self.version)

        with open(self.path, "w") as f:
            json.dump(data, f, indent=2)
        logger.info(f"Saved {len(self.configurators)} configurator(s) to {self.path}")

    def get(self, configurator_id: str) -> Optional[ConfiguratorData]:
        """Get a configurator by ID."""
        return self.configurators.get(configurator_id)

    def put(self, configurator: ConfiguratorData) -> None:
        """Add or replace a configurator."""
        self.configurators[configurator.id] = configurator
        if self.active_id is None:
            self.active_id = configurator.id

    def remove(self, configurator_id: str) -> bool:
        """Remove a configurator."""
        if configurator_id not in self.configurators:
            return False
        del self.configurators[configurator_id]
        if self.active_id == configurator_id:
            self.active_id = next(iter(self.configurators), None)
        return True

    def all(self) -> List[ConfiguratorData]:
        """Get all configurators in insertion order."""
        return list(self.configurators.values())

    def clear(self) -> None:
        self.configurators.clear()
        self.active_id = None
