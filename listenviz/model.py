"""Report model: arguments plus the hierarchical cluster tree."""

from __future__ import annotations

import logging
from typing import Any

import networkx as nx

from listenviz.explorer.tree import _build_cluster_tree, get_deepest_level
from listenviz.types import Argument, Cluster

logger = logging.getLogger(__name__)


class InvalidReferenceError(ValueError):
    """Raised when a cluster references a non-existent parent or an ID repeats."""
    pass


class ReportModel:
    """Internal representation of one clustering report.

    Holds immutable snapshots of the arguments and clusters and wraps the
    cluster tree in a NetworkX DiGraph for navigation.
    """

    def __init__(self, data: dict[str, Any]) -> None:
        """Build the report from parsed data.

        Args:
            data: Dictionary with 'arguments' and 'clusters' keys, and an
                  optional 'overview' string.

        Raises:
            InvalidReferenceError: If an ID repeats or a cluster's parent
                is missing or not one level shallower.
            pydantic.ValidationError: If a record has the wrong shape.
        """
        self._arguments: dict[str, Argument] = {}
        self._clusters: dict[str, Cluster] = {}
        self.overview: str = data.get("overview") or ""

        # Phase 1: Register clusters
        for raw in data.get("clusters", []):
            cluster = Cluster.model_validate(raw)
            if cluster.id in self._clusters:
                raise InvalidReferenceError(f"Duplicate cluster ID: '{cluster.id}'")
            self._clusters[cluster.id] = cluster

        # Phase 2: Validate parent links
        for cluster in self._clusters.values():
            if cluster.level > 0:
                self._validate_parent(cluster)

        # Phase 3: Register arguments
        for raw in data.get("arguments", []):
            argument = Argument.model_validate(raw)
            if argument.id in self._arguments:
                raise InvalidReferenceError(f"Duplicate argument ID: '{argument.id}'")
            self._arguments[argument.id] = argument

        self._tree = _build_cluster_tree(self._clusters.values())
        self._deepest_level = get_deepest_level(self._clusters.values())

        logger.info(
            "Loaded report: %d arguments, %d clusters, deepest level %d",
            len(self._arguments),
            len(self._clusters),
            self._deepest_level,
        )

    def _validate_parent(self, cluster: Cluster) -> None:
        """Validate that a non-root cluster's parent exists one level up.

        Raises:
            InvalidReferenceError: If the reference is broken.
        """
        parent = self._clusters.get(cluster.parent_id)
        if parent is None:
            raise InvalidReferenceError(
                f"Invalid parent in cluster {cluster.id}: '{cluster.parent_id}' does not exist"
            )
        if parent.level != cluster.level - 1:
            raise InvalidReferenceError(
                f"Invalid parent in cluster {cluster.id}: '{parent.id}' is at level "
                f"{parent.level}, expected {cluster.level - 1}"
            )

    @property
    def arguments(self) -> tuple[Argument, ...]:
        """All arguments, in file order."""
        return tuple(self._arguments.values())

    @property
    def clusters(self) -> tuple[Cluster, ...]:
        """All clusters, in file order."""
        return tuple(self._clusters.values())

    @property
    def deepest_level(self) -> int:
        return self._deepest_level

    @property
    def nx_graph(self) -> nx.DiGraph:
        """Access underlying NetworkX tree for advanced operations."""
        return self._tree

    def get_argument(self, argument_id: str) -> Argument | None:
        return self._arguments.get(argument_id)

    def get_cluster(self, cluster_id: str) -> Cluster | None:
        return self._clusters.get(cluster_id)

    def get_children(self, cluster_id: str) -> list[str]:
        """Get IDs of the direct children of a cluster."""
        if cluster_id not in self._tree:
            return []
        return list(self._tree.successors(cluster_id))

    def descendant_ids(self, cluster_id: str) -> set[str]:
        """Get IDs of all clusters below this one.

        Raises:
            KeyError: If cluster_id doesn't exist.
        """
        if cluster_id not in self._clusters:
            raise KeyError(f"Cluster not found: {cluster_id}")
        return set(nx.descendants(self._tree, cluster_id))

    def arguments_in_cluster(self, cluster_id: str) -> list[Argument]:
        """Get arguments that belong to a cluster.

        Raises:
            KeyError: If cluster_id doesn't exist.
        """
        if cluster_id not in self._clusters:
            raise KeyError(f"Cluster not found: {cluster_id}")
        return [a for a in self._arguments.values() if cluster_id in a.cluster_memberships]
