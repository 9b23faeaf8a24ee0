"""Cluster color palette and label helpers for report charts."""

from __future__ import annotations

import re
from pathlib import Path

# Default color palette, indexed by the numeric suffix of a cluster ID
COLORS = [
    "#1f77b4",  # blue
    "#ff7f0e",  # orange
    "#2ca02c",  # green
    "#d62728",  # red
    "#9467bd",  # purple
    "#8c564b",  # brown
    "#e377c2",  # pink
    "#7f7f7f",  # gray
    "#bcbd22",  # olive
    "#17becf",  # cyan
]

# Points outside the current selection or filter
INACTIVE_COLOR = "rgba(200, 200, 200, 0.2)"

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")


def _check_palette(palette: list[str]) -> list[str]:
    """Return the theme palette as a list, rejecting non-hex entries."""
    bad = [c for c in palette if not (isinstance(c, str) and _HEX_COLOR.fullmatch(c))]
    if bad:
        raise ValueError(f"Invalid color {bad[0]!r} in theme palette; use #RGB or #RRGGBB")
    return list(palette)


def _load_theme(theme_path: str | Path | None) -> tuple[list[str], str]:
    """Load palette and inactive color from a YAML theme file.

    Args:
        theme_path: Path to theme YAML file, or None for built-in defaults.

    Returns:
        Tuple of (palette, inactive_color).

    Raises:
        FileNotFoundError: If theme file doesn't exist.
        ValueError: If the palette is empty or holds an invalid color.
    """
    if theme_path is None:
        return list(COLORS), INACTIVE_COLOR

    path = Path(theme_path)
    if not path.exists():
        raise FileNotFoundError(f"Theme file not found: {theme_path}")

    import yaml
    data = yaml.safe_load(path.read_text()) or {}
    palette = data.get("palette", COLORS)
    if not palette:
        raise ValueError("Theme palette must contain at least one color")
    return _check_palette(palette), data.get("inactive", INACTIVE_COLOR)


def _cluster_index(cluster_id: str | None) -> int:
    """Numeric index suffix of a "<level>_<index>" cluster ID, 0 otherwise."""
    if not cluster_id or "_" not in cluster_id:
        return 0
    suffix = cluster_id.rsplit("_", 1)[1]
    try:
        return int(suffix or "0")
    except ValueError:
        return 0


def get_cluster_color(cluster_id: str | None, palette: list[str] | None = None) -> str:
    """Get the palette color for a cluster ID.

    IDs without an index suffix map to the first palette entry.
    """
    colors = palette or COLORS
    return colors[_cluster_index(cluster_id) % len(colors)]


def get_color_by_index(index: int, palette: list[str] | None = None) -> str:
    colors = palette or COLORS
    return colors[index % len(colors)]


def truncate_label(text: str, max_chars: int) -> tuple[str, bool]:
    """Shorten a chart label to max_chars characters followed by "…".

    The cut falls on the last space inside the limit when there is one.

    Returns:
        Tuple of (label, was_truncated).
    """
    if len(text) <= max_chars:
        return text, False
    cut = text.rfind(" ", 0, max_chars)
    return text[: cut if cut > 0 else max_chars] + "…", True


class ClusterPalette:
    """Map cluster IDs to chart colors."""

    def __init__(self, theme: str | Path | None = None) -> None:
        """Initialize palette.

        Args:
            theme: Path to theme YAML file with 'palette' and optional
                   'inactive' keys. Uses built-in colors if None.
        """
        self.colors, self.inactive_color = _load_theme(theme)

    def color_for(self, cluster_id: str | None) -> str:
        return get_cluster_color(cluster_id, self.colors)
