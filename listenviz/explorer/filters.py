"""Filter engine for the report explorer.

Computes which arguments and clusters satisfy a filter state. Categories
combine with AND; within the attribute filters every named attribute must
pass (AND across names, OR within an allowed-value set).
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence

from listenviz.config import DEFAULT_CONFIG, DEFAULT_MAX_DENSITY, FilterConfig
from listenviz.types import Argument, Cluster, FilterResult, FilterState

from .attributes import coerce_attribute_value, parse_number
from .tree import get_deepest_level

logger = logging.getLogger(__name__)


def density_filter_engaged(
    state: FilterState,
    apply_density_filter: bool,
    config: FilterConfig | None = None,
) -> bool:
    """Check whether density/size thresholds constrain the result.

    They only do when the caller opts in (the density chart) and at least
    one threshold is tighter than its inactive value.
    """
    if not apply_density_filter:
        return False
    config = config or DEFAULT_CONFIG
    return state.max_density_rank < DEFAULT_MAX_DENSITY or state.min_size > config.min_size_floor


def is_filtering(
    state: FilterState,
    apply_density_filter: bool = False,
    config: FilterConfig | None = None,
) -> bool:
    """Check whether any filter category is active."""
    return (
        state.text_search.strip() != ""
        or density_filter_engaged(state, apply_density_filter, config)
        or any(values for values in state.attribute_filters.values())
        or any(state.range_enabled.values())
    )


def matches_text(argument: Argument, text_search: str) -> bool:
    """Case-insensitive substring match of the trimmed search text."""
    needle = text_search.strip().lower()
    if not needle:
        return True
    return needle in argument.text.lower()


def matches_attribute_filters(
    argument: Argument,
    attribute_filters: dict[str, list[str]],
) -> bool:
    """Check every non-empty allowed-value set against the argument.

    A missing attribute reads as the empty string.
    """
    attributes = argument.attributes or {}
    for name, allowed in attribute_filters.items():
        if not allowed:
            continue
        if coerce_attribute_value(attributes.get(name)) not in allowed:
            return False
    return True


def matches_numeric_ranges(argument: Argument, state: FilterState) -> bool:
    """Check every enabled numeric range against the argument.

    Absent, empty and unparseable values pass a range only when its
    include-empty flag is set (the default). Bounds are inclusive. An
    enabled range without stored bounds is skipped.
    """
    attributes = argument.attributes or {}
    for name, enabled in state.range_enabled.items():
        if not enabled:
            continue
        bounds = state.numeric_ranges.get(name)
        if bounds is None:
            continue

        number = parse_number(coerce_attribute_value(attributes.get(name)))
        if number is None:
            if not state.include_empty_for_range.get(name, True):
                return False
            continue

        low, high = bounds
        if number < low or number > high:
            return False
    return True


def matches_argument(argument: Argument, state: FilterState) -> bool:
    """Per-argument predicate: text, attribute and numeric range filters."""
    return (
        matches_text(argument, state.text_search)
        and matches_attribute_filters(argument, state.attribute_filters)
        and matches_numeric_ranges(argument, state)
    )


def filter_clusters_by_density(
    clusters: Sequence[Cluster],
    max_density_rank: float,
    min_size: int,
) -> set[str]:
    """Get IDs of clusters passing the density and size thresholds.

    Only deepest-level clusters are tested; shallower clusters are
    structural and always pass. A missing percentile counts as 0.
    """
    deepest_level = get_deepest_level(clusters)
    passing: set[str] = set()

    for cluster in clusters:
        if cluster.level != deepest_level:
            passing.add(cluster.id)
            continue
        density = cluster.density_rank_percentile or 0.0
        if density <= max_density_rank and cluster.size >= min_size:
            passing.add(cluster.id)

    return passing


def passes_density_gate(
    argument: Argument,
    deepest_cluster_ids: Collection[str],
    passing_cluster_ids: Collection[str],
) -> bool:
    """Check an argument against the density-filtered clusters.

    An argument with no deepest-level membership passes; otherwise one
    passing deepest-level membership is enough.
    """
    memberships = [
        cid for cid in argument.cluster_memberships if cid in deepest_cluster_ids
    ]
    if not memberships:
        return True
    return any(cid in passing_cluster_ids for cid in memberships)


def apply_filters(
    arguments: Sequence[Argument],
    clusters: Sequence[Cluster],
    state: FilterState,
    apply_density_filter: bool = False,
    config: FilterConfig | None = None,
) -> FilterResult:
    """Compute the arguments and clusters matching a filter state.

    Args:
        arguments: All arguments of the report.
        clusters: All clusters of the report.
        state: Current filter state.
        apply_density_filter: Whether the current view honors the density
                              and size thresholds (the density scatter).
        config: Thresholds deciding when density filtering is inactive.

    Returns:
        FilterResult. When nothing is active, every argument and cluster ID
        is returned with is_filtering False.
    """
    filtering = is_filtering(state, apply_density_filter, config)

    if not filtering:
        return FilterResult(
            filtered_argument_ids=frozenset(a.id for a in arguments),
            filtered_cluster_ids=frozenset(c.id for c in clusters),
            is_filtering=False,
        )

    matched = [a for a in arguments if matches_argument(a, state)]

    if density_filter_engaged(state, apply_density_filter, config):
        passing_cluster_ids = filter_clusters_by_density(
            clusters, state.max_density_rank, state.min_size
        )
        deepest_level = get_deepest_level(clusters)
        deepest_cluster_ids = {c.id for c in clusters if c.level == deepest_level}
        matched = [
            a for a in matched
            if passes_density_gate(a, deepest_cluster_ids, passing_cluster_ids)
        ]
        logger.debug(
            "Density filter kept %d of %d deepest-level clusters",
            len(passing_cluster_ids & deepest_cluster_ids),
            len(deepest_cluster_ids),
        )
    else:
        passing_cluster_ids = {c.id for c in clusters}

    logger.debug("Filter kept %d of %d arguments", len(matched), len(arguments))

    return FilterResult(
        filtered_argument_ids=frozenset(a.id for a in matched),
        filtered_cluster_ids=frozenset(passing_cluster_ids),
        is_filtering=True,
    )
