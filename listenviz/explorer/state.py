"""Filter-state defaults and diffing."""

from __future__ import annotations

from listenviz.config import DEFAULT_CONFIG, DEFAULT_MAX_DENSITY, FilterConfig
from listenviz.types import FilterState


def create_default_filter_state(config: FilterConfig | None = None) -> FilterState:
    """Create the all-permissive filter state used on load and on reset."""
    config = config or DEFAULT_CONFIG
    return FilterState(
        text_search="",
        max_density_rank=DEFAULT_MAX_DENSITY,
        min_size=config.min_size_floor,
    )


def active_filter_count(state: FilterState, config: FilterConfig | None = None) -> int:
    """Count the filter controls that differ from their defaults.

    Text search, density rank and minimum size count once each; attribute
    filters count once per name with a non-empty allowed set and ranges
    once per enabled name.
    """
    config = config or DEFAULT_CONFIG
    count = 0

    if state.text_search.strip() != "":
        count += 1
    if state.max_density_rank != DEFAULT_MAX_DENSITY:
        count += 1
    if state.min_size != config.min_size_floor:
        count += 1

    count += sum(1 for values in state.attribute_filters.values() if values)
    count += sum(1 for enabled in state.range_enabled.values() if enabled)

    return count


def changed_fields(old: FilterState, new: FilterState) -> list[str]:
    """Names of the fields whose values differ between two states."""
    old_values = old.model_dump()
    new_values = new.model_dump()
    return [name for name in FilterState.model_fields if old_values[name] != new_values[name]]
