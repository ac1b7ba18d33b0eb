"""
Diagram legend.

Only items that actually occur in the graph are listed; a legend with
nothing to show renders nothing.
"""

from dataclasses import dataclass
from typing import List

from ...shared.models import BANDWIDTH_ORDER, Bounds, LegendSettings, NetworkGraph
from .geometry import fmt, line_offsets
from .icons import DEVICE_ICONS
from .labels import escape_xml
from .links import effective_link_type, line_count
from .themes import ThemeColors

LINE_HEIGHT = 20
PADDING = 12
ICON_WIDTH = 30
MAX_LABEL_WIDTH = 100
TITLE_HEIGHT = 20
EDGE_OFFSET = 10

# Extra room added to the viewBox when a legend is drawn
LEGEND_PADDING = 20


@dataclass
class LegendItem:
    icon: str
    label: str


@dataclass
class Legend:
    items: List[LegendItem]
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return not self.items


def build_legend(graph: NetworkGraph, settings: LegendSettings, colors: ThemeColors) -> Legend:
    """Collect legend items for the elements used by ``graph``."""
    items: List[LegendItem] = []

    if settings.show_bandwidth:
        used = {link.bandwidth for link in graph.links if link.bandwidth}
        for bandwidth in BANDWIDTH_ORDER:
            if bandwidth in used:
                items.append(LegendItem(
                    icon=_bandwidth_icon(line_count(bandwidth), colors),
                    label=bandwidth,
                ))

    if settings.show_cable_types:
        used_types = {effective_link_type(link) for link in graph.links}
        for link_type, dasharray in (("dashed", "5 3"), ("thick", ""), ("double", "")):
            if link_type in used_types:
                width = 3 if link_type == "thick" else 2
                dash = f' stroke-dasharray="{dasharray}"' if dasharray else ""
                items.append(LegendItem(
                    icon=(f'<line x1="0" y1="0" x2="24" y2="0" stroke="{colors.link_stroke}" '
                          f'stroke-width="{width}"{dash} />'),
                    label=link_type,
                ))

    if settings.show_device_types:
        used_devices = []
        for node in graph.nodes:
            if node.type and node.type not in used_devices:
                used_devices.append(node.type)
        for device_type in sorted(used_devices):
            items.append(LegendItem(
                icon=(f'<svg x="4" y="-8" width="16" height="16" viewBox="0 0 24 24" '
                      f'fill="{colors.label_secondary}">{DEVICE_ICONS[device_type]}</svg>'),
                label=device_type,
            ))

    if not items:
        return Legend(items=[], width=0, height=0)

    width = ICON_WIDTH + MAX_LABEL_WIDTH + PADDING * 2
    height = len(items) * LINE_HEIGHT + PADDING * 2 + TITLE_HEIGHT
    return Legend(items=items, width=width, height=height)


def render_legend(legend: Legend, bounds: Bounds, position: str, colors: ThemeColors) -> str:
    """Legend box anchored in one corner of ``bounds``."""
    if legend.is_empty:
        return ""

    left = bounds.x + EDGE_OFFSET
    right = bounds.x + bounds.width - legend.width - EDGE_OFFSET
    top = bounds.y + EDGE_OFFSET
    bottom = bounds.y + bounds.height - legend.height - EDGE_OFFSET

    x, y = {
        "top-left": (left, top),
        "top-right": (right, top),
        "bottom-left": (left, bottom),
    }.get(position, (right, bottom))

    parts = [
        f'<g class="legend" transform="translate({fmt(x)}, {fmt(y)})">',
        f'<rect x="0" y="0" width="{fmt(legend.width)}" height="{fmt(legend.height)}" rx="4" '
        f'fill="{colors.background}" stroke="{colors.subgraph_stroke}" stroke-width="1" opacity="0.95" />',
        f'<text x="{PADDING}" y="{PADDING + 12}" class="subgraph-label" font-size="11">Legend</text>',
    ]
    for index, item in enumerate(legend.items):
        item_y = PADDING + 28 + index * LINE_HEIGHT
        parts.append(f'<g transform="translate({PADDING}, {item_y})">')
        parts.append(item.icon)
        parts.append(
            f'<text x="{ICON_WIDTH + 4}" y="4" class="node-label" font-size="10">{escape_xml(item.label)}</text>'
        )
        parts.append('</g>')
    parts.append('</g>')
    return "\n".join(parts)


def _bandwidth_icon(count: int, colors: ThemeColors) -> str:
    lines = "".join(
        f'<line x1="0" y1="{fmt(offset)}" x2="24" y2="{fmt(offset)}" '
        f'stroke="{colors.link_stroke}" stroke-width="2" />'
        for offset in line_offsets(count)
    )
    return f'<g>{lines}</g>'
