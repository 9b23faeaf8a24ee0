"""Grouping and navigation operations over the cluster tree."""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence

import networkx as nx

from listenviz.types import (
    ROOT_CLUSTER_ID,
    Argument,
    ChartType,
    Cluster,
    Position,
)

# Type aliases
ClusterId = str


def _build_cluster_tree(clusters: Iterable[Cluster]) -> nx.DiGraph:
    """Build a DiGraph with an edge from each parent to its children.

    Parent references to clusters not in the list are dropped; a root
    that names itself as parent gets no self-loop.
    """
    g = nx.DiGraph()
    clusters = list(clusters)

    for cluster in clusters:
        g.add_node(cluster.id, level=cluster.level)

    for cluster in clusters:
        parent_id = cluster.parent_id
        if parent_id != cluster.id and parent_id in g and cluster.level > 0:
            g.add_edge(parent_id, cluster.id)

    return g


def cluster_level(cluster_id: ClusterId) -> int | None:
    """Parse the level encoded in a "<level>_<index>" cluster ID.

    Returns:
        The level, or None if the ID does not follow the convention.
    """
    prefix = cluster_id.split("_", 1)[0]
    try:
        return int(prefix)
    except ValueError:
        return None


def get_deepest_level(clusters: Iterable[Cluster]) -> int:
    """Deepest level present in the tree (0 for no clusters)."""
    return max((c.level for c in clusters), default=0)


def clusters_at_level(clusters: Iterable[Cluster], level: int) -> list[Cluster]:
    return [c for c in clusters if c.level == level]


def has_density_data(clusters: Iterable[Cluster]) -> bool:
    """Check whether any cluster carries a density rank percentile.

    Density filtering is unavailable for datasets without one.
    """
    return any(c.density_rank_percentile is not None for c in clusters)


def get_cluster(clusters: Iterable[Cluster], cluster_id: ClusterId) -> Cluster | None:
    for cluster in clusters:
        if cluster.id == cluster_id:
            return cluster
    return None


def children_of(clusters: Iterable[Cluster], parent_id: ClusterId) -> list[Cluster]:
    """Get the direct children of a cluster, largest first.

    Ties keep their input order.
    """
    children = [
        c for c in clusters
        if c.parent_id == parent_id and c.id != parent_id
    ]
    return sorted(children, key=lambda c: c.size, reverse=True)


def can_drill_down(clusters: Iterable[Cluster], cluster_id: ClusterId) -> bool:
    return len(children_of(clusters, cluster_id)) > 0


def get_descendant_ids(
    clusters: Iterable[Cluster],
    cluster_id: ClusterId,
) -> set[ClusterId]:
    """Get IDs of all clusters below this one (excludes cluster_id itself)."""
    g = _build_cluster_tree(clusters)
    if cluster_id not in g:
        return set()
    return set(nx.descendants(g, cluster_id))


def cluster_path(clusters: Sequence[Cluster], cluster_id: ClusterId) -> list[Cluster]:
    """Get the breadcrumb path from the top level down to a cluster.

    The root sentinel is not part of the path. The walk stops at a parent
    that doesn't exist, so a dangling reference yields a partial path.

    Args:
        clusters: All clusters of the report.
        cluster_id: Cluster at the end of the path.

    Returns:
        List of clusters, shallowest first. Empty if cluster_id is unknown.
    """
    by_id = {c.id: c for c in clusters}
    path: list[Cluster] = []
    visited: set[str] = set()
    current_id: str | None = cluster_id

    while current_id and current_id != ROOT_CLUSTER_ID and current_id not in visited:
        cluster = by_id.get(current_id)
        if cluster is None or cluster.level == 0:
            break
        visited.add(current_id)
        path.append(cluster)
        current_id = cluster.parent_id

    path.reverse()
    return path


def navigate_up(
    clusters: Iterable[Cluster],
    selected_cluster_id: ClusterId | None,
) -> ClusterId | None:
    """Resolve the "back" action of the drill-down view.

    Returns:
        The parent cluster ID, or None to return to the top-level view.
    """
    if not selected_cluster_id:
        return None
    current = get_cluster(clusters, selected_cluster_id)
    if current is None or not current.parent_id or current.parent_id == ROOT_CLUSTER_ID:
        return None
    return current.parent_id


def group_arguments_by_level(
    arguments: Iterable[Argument],
    level: int,
    clusters: Iterable[Cluster] | None = None,
) -> dict[ClusterId, list[Argument]]:
    """Partition arguments by their cluster membership at a level.

    Membership levels are looked up in clusters when given, otherwise
    parsed from the "<level>_<index>" ID convention. Arguments with no
    membership at the level are left out of every group.

    Args:
        arguments: Arguments to partition.
        level: Hierarchy level to group at.
        clusters: Optional cluster list providing explicit levels.

    Returns:
        Dict mapping cluster ID to its member arguments, in input order.
    """
    if clusters is not None:
        levels = {c.id: c.level for c in clusters}
        level_of = levels.get
    else:
        level_of = cluster_level

    groups: dict[ClusterId, list[Argument]] = {}
    for argument in arguments:
        cluster_id = next(
            (cid for cid in argument.cluster_memberships if level_of(cid) == level),
            None,
        )
        if cluster_id is not None:
            groups.setdefault(cluster_id, []).append(argument)

    return groups


def centroid(points: Sequence[Position]) -> Position | None:
    """Arithmetic mean of a set of points.

    Returns:
        The centroid, or None for no points.
    """
    if not points:
        return None
    sum_x = sum(p.x for p in points)
    sum_y = sum(p.y for p in points)
    return Position(x=sum_x / len(points), y=sum_y / len(points))


def display_clusters(
    clusters: Sequence[Cluster],
    selected_cluster_id: ClusterId | None = None,
    chart_type: ChartType = "scatterAll",
    filtered_cluster_ids: Collection[ClusterId] | None = None,
) -> list[Cluster]:
    """Pick the cluster cards shown beside the chart.

    - A drill-down selection shows the selection's children.
    - The density scatter shows the deepest-level clusters that pass
      the density filter, largest first.
    - Otherwise the top-level (level 1) clusters are shown.
    """
    if selected_cluster_id:
        return children_of(clusters, selected_cluster_id)

    if chart_type == "scatterDensity":
        deepest = clusters_at_level(clusters, get_deepest_level(clusters))
        if filtered_cluster_ids is not None:
            deepest = [c for c in deepest if c.id in filtered_cluster_ids]
        return sorted(deepest, key=lambda c: c.size, reverse=True)

    return clusters_at_level(clusters, 1)
