"""
Configuration loader for run profiles and environment variables.
"""

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple
import yaml

from ..spatial.tolerance import ToleranceRange


@dataclass
class RunConfig:
    """
    Settings for one clustering run.

    Defaults mirror the historical command line: identifiers in column 5,
    width in column 3, length in column 2, tolerance 10..25.
    """

    input_path: Optional[Path] = None
    output_path: Optional[Path] = None
    identifier_columns: List[int] = field(default_factory=lambda: [5])
    width_column: int = 3
    height_column: int = 2
    delimiter: str = ";"
    tolerance_min: float = 10.0
    tolerance_max: float = 25.0
    output_format: str = "text"
    plot: bool = False
    plot_path: Path = Path("plot.png")
    plot_size: Tuple[int, int] = (1024, 1024)
    max_workers: Optional[int] = None

    @property
    def tolerance(self) -> ToleranceRange:
        return ToleranceRange(min=float(self.tolerance_min), max=float(self.tolerance_max))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunConfig":
        """
        Build a config from a profile mapping.

        Unknown keys are rejected so typos in profiles do not pass silently.
        A nested ``tolerance: {min, max}`` block is accepted as well.
        """
        data = dict(data or {})
        tolerance = data.pop("tolerance", None)
        if tolerance is not None:
            for bound in ("min", "max"):
                if tolerance.get(bound) is not None:
                    data.setdefault(f"tolerance_{bound}", tolerance[bound])

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

        for key in ("input_path", "output_path", "plot_path"):
            if data.get(key) is not None:
                data[key] = Path(data[key])
        if "plot_size" in data:
            data["plot_size"] = tuple(int(v) for v in data["plot_size"])
        if "identifier_columns" in data:
            data["identifier_columns"] = [int(c) for c in data["identifier_columns"]]
        if data.get("max_workers") is not None:
            data["max_workers"] = int(data["max_workers"])
            if data["max_workers"] < 1:
                raise ValueError(f"max_workers must be at least 1, got {data['max_workers']}")

        return cls(**data)

    def override(self, **values: Any) -> "RunConfig":
        """Return a copy with every non-None value applied."""
        return replace(self, **{k: v for k, v in values.items() if v is not None})


class ConfigLoader:
    """Load and manage configuration from YAML files and environment."""

    CONFIG_DIR = Path(__file__).parent.parent.parent / "configs"
    ENV_VAR = "GREZZI_PROFILE"
    DEFAULT_PROFILE = "default"

    @classmethod
    def load_profile(cls, profile_name: str = DEFAULT_PROFILE) -> Dict[str, Any]:
        """
        Load a run profile.

        Args:
            profile_name: Name of the profile (default, strict, ...) or a path
                to a YAML file

        Returns:
            Dictionary with configuration values

        Raises:
            FileNotFoundError: If profile doesn't exist
        """
        candidate = Path(profile_name)
        if candidate.suffix in (".yaml", ".yml") and candidate.exists():
            profile_path = candidate
        else:
            profile_path = cls.CONFIG_DIR / f"{profile_name}.yaml"

        if not profile_path.exists():
            available = [f.stem for f in cls.CONFIG_DIR.glob("*.yaml")]
            raise FileNotFoundError(
                f"Profile '{profile_name}' not found. Available profiles: {', '.join(available)}"
            )

        with open(profile_path, "r") as f:
            return yaml.safe_load(f) or {}

    @classmethod
    def get_profile_from_env(cls) -> Optional[str]:
        """Get profile name from GREZZI_PROFILE environment variable."""
        return os.getenv(cls.ENV_VAR)

    @classmethod
    def load_default_or_env_profile(cls) -> Dict[str, Any]:
        """
        Load profile from environment variable or use the default profile.

        Returns:
            Configuration dictionary
        """
        profile = cls.get_profile_from_env() or cls.DEFAULT_PROFILE
        return cls.load_profile(profile)


def get_config(profile_name: Optional[str] = None) -> RunConfig:
    """Convenience function to get the run config for a profile (or the env default)."""
    if profile_name is None:
        data = ConfigLoader.load_default_or_env_profile()
    else:
        data = ConfigLoader.load_profile(profile_name)
    return RunConfig.from_dict(data)
