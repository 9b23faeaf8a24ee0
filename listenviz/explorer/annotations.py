"""Scatter plot annotations and point colors derived from the cluster tree."""

from __future__ import annotations

from collections.abc import Collection, Sequence

from listenviz.config import DEFAULT_ANNOTATION_LABEL_CHARS
from listenviz.styles import ClusterPalette, truncate_label
from listenviz.types import Argument, Cluster, ClusterAnnotation

from .tree import centroid, children_of, clusters_at_level, group_arguments_by_level


def build_cluster_annotations(
    arguments: Sequence[Argument],
    clusters: Sequence[Cluster],
    selected_cluster_id: str | None = None,
    max_label_chars: int = DEFAULT_ANNOTATION_LABEL_CHARS,
) -> list[ClusterAnnotation]:
    """Place a label for each visible cluster at the centroid of its points.

    The top-level view labels the level 1 clusters; a drill-down selection
    labels the selection's children. Clusters without member arguments get
    no annotation.

    Args:
        arguments: Arguments plotted on the scatter chart.
        clusters: All clusters of the report.
        selected_cluster_id: Drill-down selection, or None for the top level.
        max_label_chars: Label length before truncation.

    Returns:
        List of ClusterAnnotation, in the order of the target clusters.
    """
    if selected_cluster_id:
        targets = children_of(clusters, selected_cluster_id)
    else:
        targets = clusters_at_level(clusters, 1)

    groups_by_level: dict[int, dict[str, list[Argument]]] = {}
    annotations: list[ClusterAnnotation] = []

    for cluster in targets:
        if cluster.level not in groups_by_level:
            groups_by_level[cluster.level] = group_arguments_by_level(
                arguments, cluster.level, clusters
            )
        members = groups_by_level[cluster.level].get(cluster.id, [])
        center = centroid([a.position for a in members])
        if center is None:
            continue

        text, truncated = truncate_label(cluster.label, max_label_chars)
        annotations.append(
            ClusterAnnotation(
                cluster_id=cluster.id,
                x=center.x,
                y=center.y,
                text=text,
                truncated=truncated,
            )
        )

    return annotations


def point_colors(
    arguments: Sequence[Argument],
    clusters: Sequence[Cluster],
    selected_cluster_id: str | None = None,
    filtered_argument_ids: Collection[str] | None = None,
    palette: ClusterPalette | None = None,
) -> list[str]:
    """Compute one marker color per argument.

    The top-level view colors by level 1 cluster. A drill-down selection
    colors members of its children and grays everything else. When
    filtered_argument_ids is given, arguments outside it are grayed too.
    """
    palette = palette or ClusterPalette()

    if selected_cluster_id:
        child_ids = {c.id for c in children_of(clusters, selected_cluster_id)}
        colors = []
        for argument in arguments:
            child_id = next(
                (cid for cid in argument.cluster_memberships if cid in child_ids),
                None,
            )
            colors.append(
                palette.color_for(child_id) if child_id else palette.inactive_color
            )
    else:
        top_level_ids = {c.id for c in clusters_at_level(clusters, 1)}
        colors = []
        for argument in arguments:
            top_id = next(
                (cid for cid in argument.cluster_memberships if cid in top_level_ids),
                None,
            )
            colors.append(palette.color_for(top_id or "1_0"))

    if filtered_argument_ids is not None:
        colors = [
            color if argument.id in filtered_argument_ids else palette.inactive_color
            for argument, color in zip(arguments, colors)
        ]

    return colors
