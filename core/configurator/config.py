"""Configurator engine configuration management."""

import os
from dataclasses import dataclass

STORAGE_VERSION = "1.0"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class EngineConfig:
    """Configurator engine configuration."""

    # Component matching
    case_insensitive_components: bool = True
    report_dangling_components: bool = True

    # Storage
    data_dir: str = os.path.join("data", "configurators")
    storage_version: str = STORAGE_VERSION

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Load configuration from environment variables."""
        return cls(
            case_insensitive_components=_env_flag(
                "CONFIGURATOR_CASE_INSENSITIVE_COMPONENTS", True
            ),
            report_dangling_components=_env_flag(
                "CONFIGURATOR_REPORT_DANGLING_COMPONENTS", True
            ),
            data_dir=os.getenv("CONFIGURATOR_DATA_DIR", os.path.join("data", "configurators")),
            storage_version=os.getenv("CONFIGURATOR_STORAGE_VERSION", STORAGE_VERSION),
        )

    def component_key(self, name: str) -> str:
        """Key used to match a target name against live component names."""
        return name.lower() if self.case_insensitive_components else name
