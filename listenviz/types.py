"""Pydantic models for report data and explorer filter state."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from listenviz.config import DEFAULT_MAX_DENSITY, DEFAULT_MIN_SIZE

# Chart modes of the report view; only the density scatter engages density filtering
ChartType = Literal["scatterAll", "scatterDensity", "treemap"]

AttributeKind = Literal["numeric", "categorical"]

# Sentinel parent ID of top-level clusters
ROOT_CLUSTER_ID = "0"


class Position(BaseModel):
    """2D embedding coordinate of an argument."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Argument(BaseModel):
    """An individual opinion extracted from a comment."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., validation_alias=AliasChoices("id", "arg_id"))
    text: str = Field(..., validation_alias=AliasChoices("text", "argument"))
    position: Position
    cluster_memberships: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("cluster_memberships", "cluster_ids"),
        description="One cluster ID per hierarchy level, shallowest first",
    )
    attributes: dict[str, Any] | None = Field(
        default=None,
        description="Arbitrary per-argument metadata; values may be str, number or null",
    )
    comment_id: str | int | None = None
    url: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _collect_position(cls, data: Any) -> Any:
        # Report files store the coordinate as flat x/y keys
        if isinstance(data, dict) and "position" not in data and "x" in data:
            data = dict(data)
            data["position"] = {"x": data.pop("x"), "y": data.pop("y", 0.0)}
        return data

    @property
    def x(self) -> float:
        return self.position.x

    @property
    def y(self) -> float:
        return self.position.y


class Cluster(BaseModel):
    """A node of the hierarchical cluster tree."""

    model_config = ConfigDict(frozen=True)

    id: str
    level: int = Field(..., ge=0, description="0 is the root")
    parent_id: str = Field(
        default=ROOT_CLUSTER_ID,
        validation_alias=AliasChoices("parent_id", "parent"),
    )
    label: str = ""
    summary: str = Field(
        default="", validation_alias=AliasChoices("summary", "takeaway")
    )
    size: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("size", "value"),
        description="Number of member arguments",
    )
    density_rank_percentile: float | None = Field(
        default=None, ge=0.0, le=1.0,
        description="Only meaningful for deepest-level clusters",
    )


class FilterState(BaseModel):
    """Composable predicate configuration of the report explorer.

    Instances are immutable; every edit method returns a new state.
    """

    # Infinite range bounds dump as Infinity rather than null
    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    text_search: str = Field(
        default="", validation_alias=AliasChoices("text_search", "textSearch")
    )
    max_density_rank: float = Field(
        default=DEFAULT_MAX_DENSITY,
        validation_alias=AliasChoices("max_density_rank", "maxDensity"),
    )
    min_size: int = Field(
        default=DEFAULT_MIN_SIZE,
        validation_alias=AliasChoices("min_size", "minValue"),
    )
    attribute_filters: dict[str, list[str]] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("attribute_filters", "attributeFilters"),
    )
    numeric_ranges: dict[str, tuple[float, float]] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("numeric_ranges", "numericRanges"),
    )
    range_enabled: dict[str, bool] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("range_enabled", "enabledRanges"),
    )
    include_empty_for_range: dict[str, bool] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("include_empty_for_range", "includeEmptyValues"),
    )

    def with_text_search(self, text: str) -> "FilterState":
        return self.model_copy(update={"text_search": text})

    def with_density(self, max_density_rank: float, min_size: int) -> "FilterState":
        return self.model_copy(
            update={"max_density_rank": max_density_rank, "min_size": min_size}
        )

    def toggle_attribute_value(self, name: str, value: str) -> "FilterState":
        """Add value to the allowed set for name, or remove it if present."""
        current = self.attribute_filters.get(name, [])
        if value in current:
            updated = [v for v in current if v != value]
        else:
            updated = [*current, value]
        return self.model_copy(
            update={"attribute_filters": {**self.attribute_filters, name: updated}}
        )

    def set_range(self, name: str, low: float, high: float) -> "FilterState":
        return self.model_copy(
            update={"numeric_ranges": {**self.numeric_ranges, name: (low, high)}}
        )

    def enable_range(
        self,
        name: str,
        enabled: bool = True,
        default_range: tuple[float, float] | None = None,
    ) -> "FilterState":
        """Toggle a numeric range filter.

        The first enable of a range with no stored bounds stores
        default_range (normally the attribute's data range).
        """
        update: dict[str, Any] = {
            "range_enabled": {**self.range_enabled, name: enabled}
        }
        if enabled and name not in self.numeric_ranges and default_range is not None:
            update["numeric_ranges"] = {**self.numeric_ranges, name: tuple(default_range)}
        return self.model_copy(update=update)

    def set_include_empty(self, name: str, include: bool) -> "FilterState":
        return self.model_copy(
            update={
                "include_empty_for_range": {**self.include_empty_for_range, name: include}
            }
        )


class AttributeStats(BaseModel):
    """Derived per-attribute metadata driving the filter panel controls."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: AttributeKind
    distinct_values: list[str] = Field(
        default_factory=list, description="Sorted non-empty values"
    )
    value_counts: dict[str, int] = Field(default_factory=dict)
    numeric_range: tuple[float, float] | None = None


class FilterResult(BaseModel):
    """Arguments and clusters that survive the current filter state."""

    model_config = ConfigDict(frozen=True)

    filtered_argument_ids: frozenset[str]
    filtered_cluster_ids: frozenset[str]
    is_filtering: bool

    def for_render(self) -> tuple[frozenset[str] | None, frozenset[str] | None]:
        """ID sets for the chart layer; None means render everything normally."""
        if not self.is_filtering:
            return None, None
        return self.filtered_argument_ids, self.filtered_cluster_ids


class ClusterAnnotation(BaseModel):
    """A cluster label placed at the centroid of its member points."""

    model_config = ConfigDict(frozen=True)

    cluster_id: str
    x: float
    y: float
    text: str
    truncated: bool = False
