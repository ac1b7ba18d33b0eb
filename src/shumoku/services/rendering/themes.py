"""
Colour palettes for SVG rendering.
"""

from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True)
class ThemeColors:
    """Fixed colours used by one theme."""

    background: str
    node_fill: str
    node_stroke: str
    link_stroke: str
    label: str
    label_secondary: str
    subgraph_fill: str
    subgraph_stroke: str
    subgraph_label: str
    port_fill: str
    port_stroke: str
    port_label_bg: str
    port_label_color: str
    endpoint_label_bg: str
    endpoint_label_stroke: str


LIGHT_THEME = ThemeColors(
    background="#ffffff",
    node_fill="#e2e8f0",
    node_stroke="#64748b",
    link_stroke="#94a3b8",
    label="#1e293b",
    label_secondary="#64748b",
    subgraph_fill="#f8fafc",
    subgraph_stroke="#cbd5e1",
    subgraph_label="#374151",
    port_fill="#475569",
    port_stroke="#1e293b",
    port_label_bg="#1e293b",
    port_label_color="#ffffff",
    endpoint_label_bg="#ffffff",
    endpoint_label_stroke="#cbd5e1",
)

DARK_THEME = ThemeColors(
    background="#1e293b",
    node_fill="#334155",
    node_stroke="#64748b",
    link_stroke="#64748b",
    label="#f1f5f9",
    label_secondary="#94a3b8",
    subgraph_fill="#0f172a",
    subgraph_stroke="#475569",
    subgraph_label="#e2e8f0",
    port_fill="#64748b",
    port_stroke="#94a3b8",
    port_label_bg="#0f172a",
    port_label_color="#f1f5f9",
    endpoint_label_bg="#1e293b",
    endpoint_label_stroke="#475569",
)


def get_theme_colors(theme: Optional[str]) -> ThemeColors:
    """Palette for a theme name; anything but ``dark`` is light."""
    return DARK_THEME if theme == "dark" else LIGHT_THEME


VLAN_COLORS = (
    "#dc2626",  # red
    "#ea580c",  # orange
    "#ca8a04",  # yellow
    "#16a34a",  # green
    "#0891b2",  # cyan
    "#2563eb",  # blue
    "#7c3aed",  # violet
    "#c026d3",  # magenta
    "#db2777",  # pink
    "#059669",  # emerald
    "#0284c7",  # light blue
    "#4f46e5",  # indigo
)


def vlan_color(vlans: Optional[Iterable[int]]) -> Optional[str]:
    """
    Stable colour for a VLAN set.

    A single VLAN is coloured by its id, a trunk by the sum of its ids.
    Returns None for an empty or missing set.
    """
    ids = list(vlans or [])
    if not ids:
        return None
    key = ids[0] if len(ids) == 1 else sum(ids)
    return VLAN_COLORS[key % len(VLAN_COLORS)]
