"""Configurable defaults for the report explorer."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Density rank at which the density slider imposes no constraint
DEFAULT_MAX_DENSITY = 1.0

# Minimum cluster size treated as "no size constraint"
DEFAULT_MIN_SIZE = 1

# Categorical attributes with more distinct values than this get no chip selector
DEFAULT_MAX_CHIP_VALUES = 20

# Scatter annotation labels are truncated past this many characters
DEFAULT_ANNOTATION_LABEL_CHARS = 16


@dataclass(frozen=True)
class FilterConfig:
    """Thresholds that decide when a filter counts as active."""

    min_size_floor: int = DEFAULT_MIN_SIZE
    max_chip_values: int = DEFAULT_MAX_CHIP_VALUES
    annotation_label_chars: int = DEFAULT_ANNOTATION_LABEL_CHARS

    def __post_init__(self) -> None:
        if self.min_size_floor < 0:
            raise ValueError(
                f"min_size_floor must be non-negative, got {self.min_size_floor}"
            )
        if self.max_chip_values < 0 or self.annotation_label_chars < 1:
            raise ValueError("max_chip_values and annotation_label_chars must be positive")

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "FilterConfig":
        """Load a config from a YAML mapping.

        Args:
            config_path: Path to a YAML file with any subset of the fields.

        Returns:
            FilterConfig with unspecified fields left at their defaults.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: If the YAML is malformed or names an unknown field.
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        try:
            data = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML: {e}") from e

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FilterConfig":
        """Build a config from a plain mapping, rejecting unknown keys."""
        if not isinstance(data, dict):
            raise ValueError("Filter config must be a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown filter config keys: {', '.join(unknown)}")

        config = cls(**data)
        logger.debug("Loaded filter config: %s", config)
        return config


DEFAULT_CONFIG = FilterConfig()
