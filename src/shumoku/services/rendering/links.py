"""
Link rendering.

Bandwidth is drawn as a number of parallel lines rather than a thicker
stroke. Each parallel line is offset from the routed path with mitred
joins, and its corner radii are adjusted per vertex so that lines on the
inside of a bend curve tighter than lines on the outside.
"""

import json
from typing import Dict, List, Optional

from ...shared.models import (
    LayoutLink, LayoutNode, Link, endpoint_ip, endpoint_node, endpoint_port,
)
from .geometry import (
    DEFAULT_CORNER_RADIUS, LINE_SPACING, Point, corner_radii, cubic_path,
    fmt, is_bezier_chain, line_offsets, midpoint, offset_polyline, rounded_path,
)
from .labels import endpoint_label_position, escape_xml, label_with_background
from .themes import ThemeColors, vlan_color

BANDWIDTH_LINE_COUNT = {"1G": 1, "10G": 2, "25G": 3, "40G": 4, "100G": 5}

BASE_STROKE_WIDTH = 2
HIT_AREA_MIN_WIDTH = 12

_REDUNDANCY_TYPES = {
    "ha": "double", "vc": "double", "vss": "double", "vpc": "double", "mlag": "double",
    "stack": "thick",
}


def line_count(bandwidth: Optional[str]) -> int:
    """Number of parallel strokes drawn for a bandwidth (1 when unknown)."""
    return BANDWIDTH_LINE_COUNT.get(bandwidth or "", 1)


def effective_link_type(link: Link) -> str:
    """Explicit link type, else the one implied by its redundancy protocol."""
    if link.type:
        return link.type
    return _REDUNDANCY_TYPES.get(link.redundancy or "", "solid")


def link_stroke(link: Link, colors: ThemeColors) -> str:
    if link.style and link.style.stroke:
        return link.style.stroke
    return vlan_color(link.vlan) or colors.link_stroke


class LinkPainter:
    """
    Draws one link group: visible strokes, hit area and labels.

    Args:
        colors: Theme palette
        edge_style: ``orthogonal``, ``polyline``, ``splines`` or ``straight``
        interactive: Emit ``data-link-*`` attributes
    """

    def __init__(self, colors: ThemeColors, edge_style: str = "orthogonal", interactive: bool = False):
        self.colors = colors
        self.edge_style = edge_style
        self.interactive = interactive

    def render(self, layout_link: LayoutLink, nodes: Dict[str, LayoutNode]) -> str:
        link = layout_link.link
        points = self._route(layout_link)
        link_type = effective_link_type(link)

        body: List[str] = []
        if len(points) >= 2:
            if link_type != "invisible":
                body.extend(self._strokes(layout_link.id, link, link_type, points))
            body.append(self._hit_area(layout_link.id, link, points))
            body.extend(self._center_labels(link, points))
            body.extend(self._endpoint_labels(layout_link, points, nodes))

        attributes = f'class="link-group" data-link-id="{escape_xml(layout_link.id)}"'
        if self.interactive:
            attributes += self._data_attributes(layout_link)

        return f"<g {attributes}>\n" + "\n".join(body) + "\n</g>"

    def _route(self, layout_link: LayoutLink) -> List[Point]:
        points = [(p.x, p.y) for p in layout_link.points]
        if self.edge_style == "straight" and len(points) > 2:
            return [points[0], points[-1]]
        return points

    def _path(self, points: List[Point], offset: float = 0.0) -> str:
        if self.edge_style == "splines" and is_bezier_chain(points):
            return cubic_path(offset_polyline(points, offset))
        shifted = offset_polyline(points, offset)
        if self.edge_style == "polyline":
            return rounded_path(shifted, [0.0] * max(len(points) - 2, 0))
        return rounded_path(shifted, corner_radii(points, offset, DEFAULT_CORNER_RADIUS))

    def _strokes(self, link_id: str, link: Link, link_type: str, points: List[Point]) -> List[str]:
        stroke = link_stroke(link, self.colors)
        width = BASE_STROKE_WIDTH
        if link.style and link.style.stroke_width:
            width = link.style.stroke_width
        elif link_type == "thick":
            width = BASE_STROKE_WIDTH + 1

        dasharray = (link.style.stroke_dasharray if link.style else None) or (
            "5 3" if link_type == "dashed" else ""
        )
        paint = f'fill="none" stroke="{stroke}" stroke-width="{fmt(width)}"'
        if dasharray:
            paint += f' stroke-dasharray="{dasharray}"'
        if link.style and link.style.opacity is not None:
            paint += f' opacity="{fmt(link.style.opacity)}"'

        count = line_count(link.bandwidth)
        escaped_id = escape_xml(link_id)

        if count == 1:
            path = self._path(points)
            markers = self._markers(link)
            strokes = []
            if link_type == "double":
                strokes.append(f'<path class="link-double-outer" d="{path}" fill="none" '
                               f'stroke="{stroke}" stroke-width="{fmt(width + 2)}" />')
                strokes.append(f'<path class="link-double-inner" d="{path}" fill="none" '
                               f'stroke="{self.colors.background}" stroke-width="{fmt(max(width - 1, 0.5))}" />')
            strokes.append(f'<path class="link" data-id="{escaped_id}" d="{path}" {paint}{markers} />')
            return strokes

        return [
            f'<path class="link" data-id="{escaped_id}" d="{self._path(points, offset)}" {paint} />'
            for offset in line_offsets(count, LINE_SPACING)
        ]

    @staticmethod
    def _markers(link: Link) -> str:
        arrow = link.arrow or "none"
        markers = ""
        if arrow in ("forward", "both"):
            markers += ' marker-end="url(#arrow)"'
        if arrow in ("back", "both"):
            markers += ' marker-start="url(#arrow)"'
        return markers

    def _hit_area(self, link_id: str, link: Link, points: List[Point]) -> str:
        count = line_count(link.bandwidth)
        width = max(HIT_AREA_MIN_WIDTH, (count - 1) * LINE_SPACING + BASE_STROKE_WIDTH + 8)
        return (f'<path class="link-hit-area" data-id="{escape_xml(link_id)}" d="{self._path(points)}" '
                f'fill="none" stroke="transparent" stroke-width="{fmt(width)}" pointer-events="stroke" />')

    def _center_labels(self, link: Link, points: List[Point]) -> List[str]:
        mid_x, mid_y = midpoint(points, bezier=self.edge_style == "splines")
        lines = []
        if link.label:
            lines.append(" / ".join(link.label) if isinstance(link.label, list) else str(link.label))
        if link.vlan:
            lines.append(f"VLAN {', '.join(str(v) for v in link.vlan)}")
        if not lines:
            return []
        return [label_with_background(
            lines, mid_x, mid_y - 8, "middle",
            text_class="link-label", fill=self.colors.endpoint_label_bg,
            char_width=6, line_height=12,
        )]

    def _endpoint_labels(self, layout_link: LayoutLink, points: List[Point],
                         nodes: Dict[str, LayoutNode]) -> List[str]:
        labels = []
        ends = (
            (layout_link.from_endpoint, True),
            (layout_link.to_endpoint, False),
        )
        for endpoint, at_start in ends:
            ip = endpoint_ip(endpoint)
            if not ip:
                continue
            node = nodes.get(endpoint_node(endpoint))
            end_point = points[0] if at_start else points[-1]
            center_x = node.position.x if node else end_point[0]
            x, y, anchor = endpoint_label_position(points, at_start, center_x, endpoint_port(endpoint) or "")
            labels.append(label_with_background(
                [ip], x, y, anchor,
                text_class="endpoint-label",
                fill=self.colors.endpoint_label_bg,
                stroke=self.colors.endpoint_label_stroke,
            ))
        return labels

    @staticmethod
    def _data_attributes(layout_link: LayoutLink) -> str:
        link = layout_link.link
        attributes = (f' data-link-from="{escape_xml(layout_link.from_)}"'
                      f' data-link-to="{escape_xml(layout_link.to)}"')
        if link.bandwidth:
            attributes += f' data-link-bandwidth="{link.bandwidth}"'
        if link.vlan:
            attributes += f' data-link-vlan="{",".join(str(v) for v in link.vlan)}"'
        if link.redundancy:
            attributes += f' data-link-redundancy="{link.redundancy}"'
        payload = json.dumps(link.to_dict(), sort_keys=True)
        attributes += f' data-link-json="{escape_xml(payload)}"'
        return attributes
