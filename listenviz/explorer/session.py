"""Memoized explorer over a single loaded report."""

from __future__ import annotations

import logging
from functools import cached_property, lru_cache
from typing import TYPE_CHECKING

from listenviz.config import DEFAULT_CONFIG, FilterConfig
from listenviz.types import (
    Argument,
    AttributeStats,
    ChartType,
    Cluster,
    ClusterAnnotation,
    FilterResult,
    FilterState,
)

from .annotations import build_cluster_annotations, point_colors
from .attributes import compute_attribute_stats, split_filterable
from .filters import apply_filters
from .state import active_filter_count, create_default_filter_state
from .tree import display_clusters, has_density_data

if TYPE_CHECKING:
    from listenviz.model import ReportModel

logger = logging.getLogger(__name__)


class _StateKey:
    """Hashable wrapper comparing filter states by their JSON dump."""

    __slots__ = ("state", "dump")

    def __init__(self, state: FilterState) -> None:
        self.state = state
        self.dump = state.model_dump_json()

    def __hash__(self) -> int:
        return hash(self.dump)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _StateKey):
            return NotImplemented
        return self.dump == other.dump


class ReportExplorer:
    """Derive filter results for a report on every UI interaction.

    Results are pure functions of (filter state, chart type) over an
    immutable report, so they are memoized on the state's JSON dump.
    """

    def __init__(
        self,
        model: ReportModel,
        config: FilterConfig | None = None,
        cache_size: int = 128,
    ) -> None:
        """Initialize explorer.

        Args:
            model: The loaded report.
            config: Filter thresholds. Uses defaults if None.
            cache_size: Number of filter results to keep.
        """
        self.model = model
        self.config = config or DEFAULT_CONFIG
        self._filter_cached = lru_cache(maxsize=cache_size)(self._compute)

    @property
    def arguments(self) -> tuple[Argument, ...]:
        return self.model.arguments

    @property
    def clusters(self) -> tuple[Cluster, ...]:
        return self.model.clusters

    @cached_property
    def attribute_stats(self) -> list[AttributeStats]:
        return compute_attribute_stats(self.model.arguments)

    @cached_property
    def has_density_data(self) -> bool:
        return has_density_data(self.model.clusters)

    def filterable_attributes(self) -> tuple[list[AttributeStats], list[AttributeStats]]:
        """Attributes offered by the filter panel.

        Returns:
            Tuple of (chip-selector categorical attributes, numeric attributes
            with a range).
        """
        return split_filterable(self.attribute_stats, self.config.max_chip_values)

    def default_state(self) -> FilterState:
        return create_default_filter_state(self.config)

    def active_filter_count(self, state: FilterState) -> int:
        return active_filter_count(state, self.config)

    def filter(
        self,
        state: FilterState,
        chart_type: ChartType = "scatterAll",
    ) -> FilterResult:
        """Apply a filter state; density thresholds only apply to the density chart."""
        return self._filter_cached(_StateKey(state), chart_type)

    def _compute(self, key: _StateKey, chart_type: ChartType) -> FilterResult:
        state = key.state
        result = apply_filters(
            self.model.arguments,
            self.model.clusters,
            state,
            apply_density_filter=chart_type == "scatterDensity",
            config=self.config,
        )
        logger.debug(
            "Filtered report for %s: %d arguments, %d clusters",
            chart_type,
            len(result.filtered_argument_ids),
            len(result.filtered_cluster_ids),
        )
        return result

    def display_clusters(
        self,
        state: FilterState,
        chart_type: ChartType = "scatterAll",
        selected_cluster_id: str | None = None,
    ) -> list[Cluster]:
        result = self.filter(state, chart_type)
        return display_clusters(
            self.model.clusters,
            selected_cluster_id,
            chart_type,
            result.filtered_cluster_ids,
        )

    def annotations(self, selected_cluster_id: str | None = None) -> list[ClusterAnnotation]:
        return build_cluster_annotations(
            self.model.arguments,
            self.model.clusters,
            selected_cluster_id,
            self.config.annotation_label_chars,
        )

    def point_colors(
        self,
        state: FilterState,
        chart_type: ChartType = "scatterAll",
        selected_cluster_id: str | None = None,
    ) -> list[str]:
        """Marker colors with non-matching arguments grayed out."""
        filtered_ids, _ = self.filter(state, chart_type).for_render()
        return point_colors(
            self.model.arguments,
            self.model.clusters,
            selected_cluster_id,
            filtered_ids,
        )

    def cache_info(self):
        return self._filter_cached.cache_info()
