"""Broad-listening report explorer: filtering and aggregation over clustered opinions."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from listenviz.config import FilterConfig
from listenviz.parser import ReportParser
from listenviz.explorer import (
    ReportExplorer,
    apply_filters,
    compute_attribute_stats,
    create_default_filter_state,
)
from listenviz.types import FilterResult, FilterState

if TYPE_CHECKING:
    from listenviz.model import ReportModel

__version__ = "0.1.0"

__all__ = [
    "load",
    "explore",
    "apply_filters",
    "compute_attribute_stats",
    "create_default_filter_state",
    "FilterConfig",
    "FilterResult",
    "FilterState",
    "ReportExplorer",
]


def load(input_path: str | Path) -> "ReportModel":
    """Load a clustering report from JSON or YAML.

    Args:
        input_path: Path to the report file.

    Returns:
        ReportModel instance.
    """
    parser = ReportParser()
    return parser.parse(input_path)


def explore(
    input_path: str | Path,
    config: FilterConfig | str | Path | None = None,
) -> ReportExplorer:
    """Load a report and wrap it in a memoizing explorer.

    Args:
        input_path: Path to the report file.
        config: FilterConfig, path to a YAML config file, or None for defaults.

    Returns:
        ReportExplorer for the report.
    """
    if config is not None and not isinstance(config, FilterConfig):
        config = FilterConfig.from_yaml(config)
    return ReportExplorer(load(input_path), config=config)
