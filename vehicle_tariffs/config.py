"""Application configuration for vehicle_tariffs."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from vehicle_tariffs.codec import DEFAULT_EXPORT_FILENAME
from vehicle_tariffs.tariffs import BUNDLED_DATA_DIR, REGIONS_FILENAME, VEHICLES_FILENAME

ENV_STORAGE_PATH = "VEHAPP_STORAGE_PATH"
ENV_DATA_DIR = "VEHAPP_DATA_DIR"


def default_storage_path() -> Path:
    return Path.home() / ".vehapp" / "storage.json"


@dataclasses.dataclass(frozen=True)
class AppConfig:
    """
    Where the application keeps its data.

    Parameters
    ----------
    storage_path : Path
        JSON file holding the durable storage slot.
    data_dir : Path or None
        Directory with ``regions.json`` and ``vehicles.json``. None uses
        the dataset bundled with the package.
    export_filename : str
        Default file name for exports.
    """

    storage_path: Path = dataclasses.field(default_factory=default_storage_path)
    data_dir: Optional[Path] = None
    export_filename: str = DEFAULT_EXPORT_FILENAME

    @property
    def reference_dir(self) -> Path:
        return self.data_dir if self.data_dir is not None else BUNDLED_DATA_DIR

    @property
    def regions_path(self) -> Path:
        return self.reference_dir / REGIONS_FILENAME

    @property
    def vehicles_path(self) -> Path:
        return self.reference_dir / VEHICLES_FILENAME

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> "AppConfig":
        """Build a config from environment variables; non-None overrides win."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        storage = env.get(ENV_STORAGE_PATH, "").strip()
        if storage:
            values["storage_path"] = Path(storage).expanduser()
        data_dir = env.get(ENV_DATA_DIR, "").strip()
        if data_dir:
            values["data_dir"] = Path(data_dir).expanduser()

        for key, value in overrides.items():
            if value is None:
                continue
            if key in ("storage_path", "data_dir"):
                value = Path(value).expanduser()
            values[key] = value
        return cls(**values)
