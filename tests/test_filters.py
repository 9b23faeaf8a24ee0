"""Tests for the filter engine."""

import pytest

from listenviz.config import FilterConfig
from listenviz.explorer import (
    apply_filters,
    create_default_filter_state,
    filter_clusters_by_density,
    is_filtering,
    passes_density_gate,
)
from listenviz.types import Argument, Cluster, FilterState


def _argument(arg_id, text="", memberships=(), attributes=None):
    return Argument(
        id=arg_id,
        text=text,
        position={"x": 0.0, "y": 0.0},
        cluster_memberships=list(memberships),
        attributes=attributes,
    )


def _cluster(cluster_id, level, parent_id, size=1, density=None):
    return Cluster(
        id=cluster_id,
        level=level,
        parent_id=parent_id,
        label=cluster_id,
        size=size,
        density_rank_percentile=density,
    )


@pytest.fixture
def scenario_arguments():
    return [
        _argument("a1", "good idea", ["1_0", "2_0"], {"score": "5"}),
        _argument("a2", "bad idea", ["1_0", "2_1"], {"score": "1"}),
        _argument("a3", "neutral", ["1_0", "2_2"], {"score": ""}),
    ]


@pytest.fixture
def scenario_clusters():
    return [
        _cluster("0", 0, "0", size=3),
        _cluster("1_0", 1, "0", size=3),
        _cluster("2_0", 2, "1_0", size=1, density=0.1),
        _cluster("2_1", 2, "1_0", size=1, density=0.6),
        _cluster("2_2", 2, "1_0", size=1, density=0.9),
    ]


class TestActivity:
    """Test detection of active filters."""

    def test_default_state_is_inactive(self):
        state = create_default_filter_state()
        assert is_filtering(state) is False
        assert is_filtering(state, apply_density_filter=True) is False

    def test_whitespace_search_is_inactive(self):
        assert is_filtering(FilterState(text_search="   ")) is False

    def test_empty_allowed_set_is_inactive(self):
        assert is_filtering(FilterState(attribute_filters={"score": []})) is False

    def test_disabled_range_is_inactive(self):
        state = FilterState(numeric_ranges={"score": (0, 1)}, range_enabled={"score": False})
        assert is_filtering(state) is False

    def test_density_only_counts_when_requested(self):
        state = FilterState(max_density_rank=0.5)
        assert is_filtering(state) is False
        assert is_filtering(state, apply_density_filter=True) is True

    def test_min_size_floor_is_configurable(self):
        state = FilterState(min_size=3)
        assert is_filtering(state, apply_density_filter=True) is True
        config = FilterConfig(min_size_floor=5)
        assert is_filtering(state, apply_density_filter=True, config=config) is False


class TestNoOp:
    """Default state returns everything."""

    def test_default_returns_all_ids(self, scenario_arguments, scenario_clusters):
        for density in (False, True):
            result = apply_filters(
                scenario_arguments, scenario_clusters,
                create_default_filter_state(), apply_density_filter=density,
            )
            assert result.is_filtering is False
            assert result.filtered_argument_ids == {"a1", "a2", "a3"}
            assert result.filtered_cluster_ids == {"0", "1_0", "2_0", "2_1", "2_2"}
            assert result.for_render() == (None, None)

    def test_default_returns_all_ids_under_custom_config(self, scenario_arguments, scenario_clusters):
        config = FilterConfig(min_size_floor=4, max_chip_values=2, annotation_label_chars=8)
        result = apply_filters(
            scenario_arguments, scenario_clusters,
            create_default_filter_state(config), apply_density_filter=True, config=config,
        )
        assert result.is_filtering is False
        assert result.filtered_argument_ids == {"a1", "a2", "a3"}
        assert result.filtered_cluster_ids == {"0", "1_0", "2_0", "2_1", "2_2"}


class TestTextSearch:
    """Test the free-text predicate."""

    def test_case_insensitive(self, scenario_arguments, scenario_clusters):
        result = apply_filters(scenario_arguments, scenario_clusters, FilterState(text_search="IDEA"))
        assert result.filtered_argument_ids == {"a1", "a2"}
        assert result.filtered_cluster_ids == {"0", "1_0", "2_0", "2_1", "2_2"}

    def test_trimmed(self, scenario_arguments, scenario_clusters):
        result = apply_filters(scenario_arguments, scenario_clusters, FilterState(text_search="  good "))
        assert result.filtered_argument_ids == {"a1"}

    def test_extension_narrows(self, scenario_arguments, scenario_clusters):
        previous = None
        for query in ["i", "id", "ide", "idea", "idea!"]:
            ids = apply_filters(
                scenario_arguments, scenario_clusters, FilterState(text_search=query)
            ).filtered_argument_ids
            if previous is not None:
                assert ids <= previous
            previous = ids
        assert previous == frozenset()


class TestAttributeFilters:
    """Test categorical attribute predicates."""

    def test_or_within_name(self):
        arguments = [
            _argument("a1", attributes={"region": "north"}),
            _argument("a2", attributes={"region": "south"}),
            _argument("a3", attributes={"region": "east"}),
        ]
        state = FilterState(attribute_filters={"region": ["north", "south"]})
        assert apply_filters(arguments, [], state).filtered_argument_ids == {"a1", "a2"}

    def test_and_across_names(self):
        arguments = [
            _argument("a1", attributes={"region": "north", "gender": "f"}),
            _argument("a2", attributes={"region": "north", "gender": "m"}),
            _argument("a3", attributes={"region": "south", "gender": "f"}),
        ]
        state = FilterState(attribute_filters={"region": ["north"], "gender": ["f"]})
        assert apply_filters(arguments, [], state).filtered_argument_ids == {"a1"}

    def test_missing_attribute_reads_as_empty(self):
        arguments = [
            _argument("a1", attributes={"region": "north"}),
            _argument("a2", attributes={}),
            _argument("a3", attributes={"region": None}),
            _argument("a4"),
        ]
        state = FilterState(attribute_filters={"region": [""]})
        assert apply_filters(arguments, [], state).filtered_argument_ids == {"a2", "a3", "a4"}

    def test_numbers_compare_as_strings(self):
        arguments = [_argument("a1", attributes={"age": 30}), _argument("a2", attributes={"age": 31})]
        state = FilterState(attribute_filters={"age": ["30"]})
        assert apply_filters(arguments, [], state).filtered_argument_ids == {"a1"}

    def test_unknown_attribute_with_empty_set_is_inert(self, scenario_arguments, scenario_clusters):
        state = FilterState(attribute_filters={"missing": []}, text_search="idea")
        result = apply_filters(scenario_arguments, scenario_clusters, state)
        assert result.filtered_argument_ids == {"a1", "a2"}


class TestNumericRanges:
    """Test numeric range predicates."""

    def test_scenario(self, scenario_arguments, scenario_clusters):
        state = FilterState.model_validate({
            "attributeFilters": {"score": []},
            "numericRanges": {"score": [3, 10]},
            "enabledRanges": {"score": True},
            "includeEmptyValues": {"score": True},
        })
        result = apply_filters(scenario_arguments, scenario_clusters, state)
        assert result.is_filtering is True
        assert result.filtered_argument_ids == {"a1", "a3"}

    def test_bounds_inclusive(self):
        arguments = [
            _argument("low", attributes={"score": 3}),
            _argument("high", attributes={"score": "10"}),
            _argument("below", attributes={"score": 2.99}),
            _argument("above", attributes={"score": 10.01}),
        ]
        state = FilterState(numeric_ranges={"score": (3, 10)}, range_enabled={"score": True})
        assert apply_filters(arguments, [], state).filtered_argument_ids == {"low", "high"}

    def test_exclude_empty(self):
        arguments = [
            _argument("value", attributes={"score": 5}),
            _argument("absent", attributes={}),
            _argument("blank", attributes={"score": ""}),
            _argument("null", attributes={"score": None}),
            _argument("text", attributes={"score": "n/a"}),
        ]
        base = FilterState(numeric_ranges={"score": (0, 10)}, range_enabled={"score": True})

        excluded = apply_filters(arguments, [], base.set_include_empty("score", False))
        assert excluded.filtered_argument_ids == {"value"}

        included = apply_filters(arguments, [], base.set_include_empty("score", True))
        assert included.filtered_argument_ids == {"value", "absent", "blank", "null", "text"}

    def test_include_empty_defaults_true(self):
        arguments = [_argument("absent", attributes={})]
        state = FilterState(numeric_ranges={"score": (100, 200)}, range_enabled={"score": True})
        assert apply_filters(arguments, [], state).filtered_argument_ids == {"absent"}

    def test_enabled_range_without_bounds_is_skipped(self):
        arguments = [_argument("a1", attributes={"score": 5})]
        state = FilterState(range_enabled={"score": True})
        result = apply_filters(arguments, [], state)
        assert result.is_filtering is True
        assert result.filtered_argument_ids == {"a1"}


class TestDensity:
    """Test the cluster-level density and size gate."""

    def test_cluster_pass_set(self, scenario_clusters):
        passing = filter_clusters_by_density(scenario_clusters, 0.6, 1)
        assert passing == {"0", "1_0", "2_0", "2_1"}

    def test_missing_percentile_counts_as_zero(self):
        clusters = [_cluster("0", 0, "0"), _cluster("1_0", 1, "0", size=4)]
        assert filter_clusters_by_density(clusters, 0.0, 1) == {"0", "1_0"}

    def test_min_size(self):
        clusters = [
            _cluster("0", 0, "0", size=5),
            _cluster("1_0", 1, "0", size=4, density=0.1),
            _cluster("1_1", 1, "0", size=1, density=0.1),
        ]
        assert filter_clusters_by_density(clusters, 1.0, 2) == {"0", "1_0"}

    def test_ignored_without_density_view(self, scenario_arguments, scenario_clusters):
        state = FilterState(max_density_rank=0.1, text_search="idea")
        result = apply_filters(scenario_arguments, scenario_clusters, state)
        assert result.filtered_argument_ids == {"a1", "a2"}
        assert result.filtered_cluster_ids == {"0", "1_0", "2_0", "2_1", "2_2"}

    def test_density_view(self, scenario_arguments, scenario_clusters):
        state = FilterState(max_density_rank=0.5)
        result = apply_filters(
            scenario_arguments, scenario_clusters, state, apply_density_filter=True
        )
        assert result.is_filtering is True
        assert result.filtered_argument_ids == {"a1"}
        assert result.filtered_cluster_ids == {"0", "1_0", "2_0"}

    def test_density_combines_with_text(self, scenario_arguments, scenario_clusters):
        state = FilterState(max_density_rank=0.7, text_search="bad")
        result = apply_filters(
            scenario_arguments, scenario_clusters, state, apply_density_filter=True
        )
        assert result.filtered_argument_ids == {"a2"}

    def test_or_across_deepest_memberships(self, scenario_clusters):
        arguments = [
            _argument("both", memberships=["1_0", "2_0", "2_2"]),
            _argument("failing", memberships=["1_0", "2_2"]),
            _argument("shallow", memberships=["1_0"]),
        ]
        state = FilterState(max_density_rank=0.5)
        result = apply_filters(arguments, scenario_clusters, state, apply_density_filter=True)
        assert result.filtered_argument_ids == {"both", "shallow"}

    def test_gate_vacuous_pass(self):
        argument = _argument("a1", memberships=["1_0"])
        assert passes_density_gate(argument, {"2_0"}, set()) is True
        assert passes_density_gate(_argument("a2", memberships=["2_0"]), {"2_0"}, set()) is False


class TestPurity:
    """Results depend only on the inputs."""

    def test_idempotent(self, scenario_arguments, scenario_clusters):
        state = FilterState(
            text_search="idea",
            numeric_ranges={"score": (0, 3)},
            range_enabled={"score": True},
            max_density_rank=0.8,
        )
        first = apply_filters(scenario_arguments, scenario_clusters, state, apply_density_filter=True)
        second = apply_filters(scenario_arguments, scenario_clusters, state, apply_density_filter=True)
        assert first == second
        assert first.filtered_argument_ids == {"a2"}

    def test_short_circuit_matches_full_evaluation(self, scenario_arguments, scenario_clusters):
        inactive = apply_filters(scenario_arguments, scenario_clusters, FilterState())
        # Enabling a range that admits everything forces the full path
        permissive = FilterState(numeric_ranges={"score": (-1e9, 1e9)}, range_enabled={"score": True})
        full = apply_filters(scenario_arguments, scenario_clusters, permissive)
        assert full.is_filtering is True
        assert full.filtered_argument_ids == inactive.filtered_argument_ids
        assert full.filtered_cluster_ids == inactive.filtered_cluster_ids
