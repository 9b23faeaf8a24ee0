"""Serialization utilities for explorer results."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from listenviz.types import AttributeStats, FilterResult


def filter_result_to_dict(result: FilterResult) -> dict[str, Any]:
    """Convert a FilterResult to a JSON-serializable dict.

    ID sets become sorted lists so the output is deterministic.
    """
    return {
        "filtered_argument_ids": sorted(result.filtered_argument_ids),
        "filtered_cluster_ids": sorted(result.filtered_cluster_ids),
        "is_filtering": result.is_filtering,
    }


def attribute_stats_to_dict(stats: Iterable[AttributeStats]) -> list[dict[str, Any]]:
    """Convert attribute stats to JSON-serializable dicts."""
    return [s.model_dump(mode="json") for s in stats]
