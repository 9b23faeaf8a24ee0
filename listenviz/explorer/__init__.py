"""Filter and aggregation core of the report explorer.

All operations are pure functions over immutable arguments and clusters,
safe to call on every UI interaction.

Example usage:
    from listenviz.explorer import (
        apply_filters,
        compute_attribute_stats,
        create_default_filter_state,
    )

    # Derive the filter panel controls
    stats = compute_attribute_stats(model.arguments)

    # Narrow to arguments mentioning buses
    state = create_default_filter_state().with_text_search("bus")
    result = apply_filters(model.arguments, model.clusters, state)
"""

# Attributes - filter panel metadata
from .attributes import (
    coerce_attribute_value,
    parse_number,
    compute_attribute_stats,
    split_filterable,
)

# Filters - predicate engine
from .filters import (
    apply_filters,
    is_filtering,
    density_filter_engaged,
    matches_argument,
    matches_text,
    matches_attribute_filters,
    matches_numeric_ranges,
    filter_clusters_by_density,
    passes_density_gate,
)

# State - defaults and diffing
from .state import (
    create_default_filter_state,
    active_filter_count,
    changed_fields,
)

# Tree - grouping and navigation
from .tree import (
    cluster_level,
    get_deepest_level,
    clusters_at_level,
    has_density_data,
    get_cluster,
    children_of,
    can_drill_down,
    get_descendant_ids,
    cluster_path,
    navigate_up,
    group_arguments_by_level,
    centroid,
    display_clusters,
)

# Annotations - chart label placement and colors
from .annotations import (
    build_cluster_annotations,
    point_colors,
)

# Serialization
from .serialize import filter_result_to_dict, attribute_stats_to_dict

# Session - memoized facade
from .session import ReportExplorer

__all__ = [
    # Attributes
    "coerce_attribute_value",
    "parse_number",
    "compute_attribute_stats",
    "split_filterable",
    # Filters
    "apply_filters",
    "is_filtering",
    "density_filter_engaged",
    "matches_argument",
    "matches_text",
    "matches_attribute_filters",
    "matches_numeric_ranges",
    "filter_clusters_by_density",
    "passes_density_gate",
    # State
    "create_default_filter_state",
    "active_filter_count",
    "changed_fields",
    # Tree
    "cluster_level",
    "get_deepest_level",
    "clusters_at_level",
    "has_density_data",
    "get_cluster",
    "children_of",
    "can_drill_down",
    "get_descendant_ids",
    "cluster_path",
    "navigate_up",
    "group_arguments_by_level",
    "centroid",
    "display_clusters",
    # Annotations
    "build_cluster_annotations",
    "point_colors",
    # Serialization
    "filter_result_to_dict",
    "attribute_stats_to_dict",
    # Session
    "ReportExplorer",
]
