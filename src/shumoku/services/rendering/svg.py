"""
SVG renderer.

Turns a NetworkGraph and its LayoutResult into a self-contained SVG
document. Rendering is pure: identical inputs always produce identical
output, and neither input is modified.

Layer order: subgraphs, links, nodes, node ports. Ports come last so
they stay clickable above node bodies.
"""

import json
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from ...shared.infrastructure.monitoring import get_logger, timed_operation
from ...shared.models import (
    Bounds, LayoutNode, LayoutPort, LayoutResult, LayoutSubgraph, NetworkGraph,
)
from .geometry import fmt
from .icons import ICON_LABEL_GAP, LABEL_LINE_HEIGHT, resolve_icon
from .labels import clean_label, escape_xml
from .legend import LEGEND_PADDING, build_legend, render_legend
from .links import LinkPainter
from .models import RenderOptions
from .shapes import render_shape
from .themes import ThemeColors, get_theme_colors

DEFAULT_BOUNDS = Bounds(x=0, y=0, width=800, height=600)

PORT_LABEL_OFFSET = 12
PORT_LABEL_CHAR_WIDTH = 5.5
PORT_LABEL_HEIGHT = 12

SUBGRAPH_RADIUS = 8
SUBGRAPH_ICON_SIZE = 24
SUBGRAPH_ICON_PADDING = 8
SUBGRAPH_HEADER = 30

_SVG_OPEN = re.compile(r"<svg\b[^>]*>", re.IGNORECASE)
_VIEWBOX = re.compile(r'viewBox="([^"]+)"')


@dataclass(frozen=True)
class _RenderContext:
    """Per-call rendering state."""

    colors: ThemeColors
    edge_style: str
    options: RenderOptions


class SVGRenderer:
    """
    Renders positioned network graphs as SVG.

    The renderer never raises for geometric problems: missing or invalid
    bounds fall back to an 800x600 viewBox and missing icons are skipped.
    """

    def __init__(self, options: Optional[RenderOptions] = None):
        self.options = options or RenderOptions()
        self.logger = get_logger(__name__)

    @timed_operation("render_svg_duration")
    def render(self, graph: NetworkGraph, layout: LayoutResult) -> str:
        """
        Render a graph with its computed layout.

        Args:
            graph: Graph to draw (settings select theme, edge style and legend)
            layout: Positions and routes produced by a layout engine

        Returns:
            Complete SVG document
        """
        settings = graph.settings
        context = _RenderContext(
            colors=get_theme_colors(settings.theme or self.options.theme),
            edge_style=settings.edge_style or "orthogonal",
            options=self.options,
        )

        bounds = layout.bounds if layout.bounds is not None and layout.bounds.is_valid() else DEFAULT_BOUNDS

        legend_settings = settings.legend_settings()
        legend = build_legend(graph, legend_settings, context.colors) if legend_settings.enabled else None
        width, height = bounds.width, bounds.height
        if legend is not None and not legend.is_empty:
            width += LEGEND_PADDING
            height += LEGEND_PADDING

        view_box = f"{fmt(bounds.x)} {fmt(bounds.y)} {fmt(width)} {fmt(height)}"
        parts = [
            self._header(view_box, width, height, context),
            self._defs(context),
            self._styles(context),
            '<g class="subgraphs">',
        ]
        for subgraph in self._ordered_subgraphs(layout):
            parts.append(self._subgraph(subgraph, context))
        parts.append('</g>')

        painter = LinkPainter(context.colors, context.edge_style, self.options.interactive)
        parts.append('<g class="links">')
        for layout_link in layout.links.values():
            parts.append(painter.render(layout_link, layout.nodes))
        parts.append('</g>')

        parts.append('<g class="nodes">')
        for layout_node in layout.nodes.values():
            parts.append(self._node(layout_node, context))
        parts.append('</g>')

        parts.append('<g class="ports">')
        for layout_node in layout.nodes.values():
            if layout_node.ports:
                parts.append(self._node_ports(layout_node, context))
        parts.append('</g>')

        if legend is not None and not legend.is_empty:
            parts.append(render_legend(legend, bounds, legend_settings.position, context.colors))

        parts.append('</svg>')
        return "\n".join(parts)

    # === Document scaffolding ===

    @staticmethod
    def _header(view_box: str, width: float, height: float, context: _RenderContext) -> str:
        return (f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="{view_box}" '
                f'width="{fmt(width)}" height="{fmt(height)}" '
                f'style="background: {context.colors.background}">')

    @staticmethod
    def _defs(context: _RenderContext) -> str:
        return "\n".join([
            '<defs>',
            '<marker id="arrow" markerWidth="10" markerHeight="7" refX="9" refY="3.5" orient="auto-start-reverse">',
            f'<polygon points="0 0, 10 3.5, 0 7" fill="{context.colors.link_stroke}" />',
            '</marker>',
            '<filter id="shadow" x="-20%" y="-20%" width="140%" height="140%">',
            '<feDropShadow dx="2" dy="2" stdDeviation="3" flood-opacity="0.15" />',
            '</filter>',
            '</defs>',
        ])

    @staticmethod
    def _styles(context: _RenderContext) -> str:
        colors = context.colors
        font = context.options.font_family
        return "\n".join([
            '<style>',
            '.node { cursor: pointer; }',
            f'.node-label {{ font-family: {font}; font-size: 12px; fill: {colors.label}; }}',
            '.node-label-bold { font-weight: bold; }',
            f'.node-icon {{ color: {colors.label_secondary}; }}',
            f'.subgraph-label {{ font-family: {font}; font-size: 14px; font-weight: 600; fill: {colors.subgraph_label}; }}',
            f'.link-label {{ font-family: {font}; font-size: 11px; fill: {colors.label_secondary}; }}',
            f'.endpoint-label {{ font-family: {font}; font-size: 9px; fill: {colors.label}; }}',
            f'.port-label {{ font-family: {font}; font-size: 9px; fill: {colors.port_label_color}; }}',
            '.link-hit-area { cursor: pointer; }',
            '.subgraph[data-has-sheet] { cursor: zoom-in; }',
            '</style>',
        ])

    # === Subgraphs ===

    @staticmethod
    def _ordered_subgraphs(layout: LayoutResult) -> List[LayoutSubgraph]:
        """Outer subgraphs first so nested boxes are drawn on top."""
        def depth(subgraph: LayoutSubgraph) -> int:
            level, parent, seen = 0, subgraph.subgraph.parent, set()
            while parent and parent in layout.subgraphs and parent not in seen:
                seen.add(parent)
                level += 1
                parent = layout.subgraphs[parent].subgraph.parent
            return level

        return sorted(layout.subgraphs.values(), key=depth)

    def _subgraph(self, layout_subgraph: LayoutSubgraph, context: _RenderContext) -> str:
        bounds = layout_subgraph.bounds
        subgraph = layout_subgraph.subgraph
        style = subgraph.style
        colors = context.colors

        fill = (style.fill if style else None) or colors.subgraph_fill
        stroke = (style.stroke if style else None) or colors.subgraph_stroke
        stroke_width = (style.stroke_width if style else None) or 1
        dasharray = (style.stroke_dasharray if style else None) or ""

        attributes = f'class="subgraph" data-id="{escape_xml(layout_subgraph.id)}"'
        if subgraph.file:
            data_bounds = json.dumps({
                "x": round(bounds.x, 2), "y": round(bounds.y, 2),
                "width": round(bounds.width, 2), "height": round(bounds.height, 2),
            })
            sheet_id = context.options.sheet_id_for(layout_subgraph.id)
            attributes += (f' data-has-sheet="true" data-sheet-id="{escape_xml(sheet_id)}"'
                           f' data-bounds="{escape_xml(data_bounds)}"')

        rect = (f'<rect x="{fmt(bounds.x)}" y="{fmt(bounds.y)}" width="{fmt(bounds.width)}" '
                f'height="{fmt(bounds.height)}" rx="{SUBGRAPH_RADIUS}" ry="{SUBGRAPH_RADIUS}" '
                f'fill="{fill}" stroke="{stroke}" stroke-width="{fmt(stroke_width)}"'
                + (f' stroke-dasharray="{dasharray}"' if dasharray else "") + ' />')
        parts = [f'<g {attributes}>', rect]

        label_x = bounds.x + 10
        if subgraph.icon:
            icon_x = bounds.x + SUBGRAPH_ICON_PADDING
            icon_y = bounds.y + SUBGRAPH_ICON_PADDING
            parts.append(
                f'<image class="subgraph-icon" href="{escape_xml(subgraph.icon)}" x="{fmt(icon_x)}" '
                f'y="{fmt(icon_y)}" width="{SUBGRAPH_ICON_SIZE}" height="{SUBGRAPH_ICON_SIZE}" />'
            )
            label_x = bounds.x + SUBGRAPH_ICON_SIZE + SUBGRAPH_ICON_PADDING * 2

        parts.append(
            f'<text x="{fmt(label_x)}" y="{fmt(bounds.y + 20)}" class="subgraph-label" '
            f'text-anchor="start">{escape_xml(subgraph.label)}</text>'
        )

        embedded = context.options.embedded_sheets.get(layout_subgraph.id)
        if embedded:
            parts.append(self._embedded_sheet(embedded, bounds))

        center_x = bounds.x + bounds.width / 2
        center_y = bounds.y + bounds.height / 2
        for port in layout_subgraph.ports.values():
            parts.extend(self._port(port, center_x, center_y, layout_subgraph.id, context))

        parts.append('</g>')
        return "\n".join(parts)

    @staticmethod
    def _embedded_sheet(svg: str, bounds: Bounds) -> str:
        """Nest a rendered child sheet below the subgraph header."""
        opening = _SVG_OPEN.search(svg)
        view_box_match = _VIEWBOX.search(opening.group(0)) if opening else None
        inner = svg[opening.end():] if opening else svg
        closing = inner.rfind("</svg>")
        if closing != -1:
            inner = inner[:closing]

        view_box = f' viewBox="{view_box_match.group(1)}"' if view_box_match else ""
        inner_height = max(bounds.height - SUBGRAPH_HEADER - 10, 0)
        return (f'<svg class="embedded-sheet" x="{fmt(bounds.x + 10)}" y="{fmt(bounds.y + SUBGRAPH_HEADER)}" '
                f'width="{fmt(max(bounds.width - 20, 0))}" height="{fmt(inner_height)}"{view_box} '
                f'preserveAspectRatio="xMidYMid meet">{inner}</svg>')

    # === Nodes ===

    def _node(self, layout_node: LayoutNode, context: _RenderContext) -> str:
        node = layout_node.node
        x, y = layout_node.position.x, layout_node.position.y
        w, h = layout_node.size.width, layout_node.size.height
        colors = context.colors
        style = node.style

        fill = (style.fill if style else None) or colors.node_fill
        stroke = (style.stroke if style else None) or colors.node_stroke
        stroke_width = (style.stroke_width if style else None) or 1
        dasharray = (style.stroke_dasharray if style else None) or ""

        classes = "node export-connector" if node.is_export else "node"
        attributes = f'class="{classes}" data-id="{escape_xml(layout_node.id)}" filter="url(#shadow)"'
        if context.options.interactive:
            attributes += self._node_data_attributes(layout_node)

        shape = render_shape(node.shape, x, y, w, h, fill, stroke, stroke_width, dasharray)
        content = self._node_content(layout_node, context)

        return "\n".join([
            f'<g {attributes}>',
            f'<g class="node-bg">{shape}</g>',
            f'<g class="node-fg">{content}</g>',
            '</g>',
        ])

    def _node_content(self, layout_node: LayoutNode, context: _RenderContext) -> str:
        """Icon over label lines, centred vertically as one block."""
        node = layout_node.node
        x, y = layout_node.position.x, layout_node.position.y

        icon = None if node.is_export else resolve_icon(
            node, layout_node.size.width, context.options.icon_dimensions
        )
        lines = node.label_lines
        icon_height = icon.height if icon else 0
        gap = ICON_LABEL_GAP if icon_height > 0 else 0
        content_top = y - (icon_height + gap + len(lines) * LABEL_LINE_HEIGHT) / 2

        parts = []
        if icon:
            parts.append(
                f'<g class="node-icon" transform="translate({fmt(x - icon.width / 2)}, {fmt(content_top)})">'
                f'{icon.svg}</g>'
            )

        baseline = content_top + icon_height + gap + LABEL_LINE_HEIGHT * 0.7
        text_color = node.style.text_color if node.style and node.style.text_color else None
        for i, line in enumerate(lines):
            text, bold = clean_label(line)
            css = "node-label node-label-bold" if bold else "node-label"
            fill = f' fill="{text_color}"' if text_color else ""
            parts.append(
                f'<text x="{fmt(x)}" y="{fmt(baseline + i * LABEL_LINE_HEIGHT)}" class="{css}" '
                f'text-anchor="middle"{fill}>{escape_xml(text)}</text>'
            )
        return "\n".join(parts)

    @staticmethod
    def _node_data_attributes(layout_node: LayoutNode) -> str:
        node = layout_node.node
        attributes = ""
        if node.type:
            attributes += f' data-device-type="{escape_xml(node.type)}"'
        if node.vendor:
            attributes += f' data-device-vendor="{escape_xml(node.vendor)}"'
        if node.model:
            attributes += f' data-device-model="{escape_xml(node.model)}"'
        payload = json.dumps(node.to_dict(), sort_keys=True)
        attributes += f' data-device-json="{escape_xml(payload)}"'
        return attributes

    # === Ports ===

    def _node_ports(self, layout_node: LayoutNode, context: _RenderContext) -> str:
        parts = [f'<g class="node-ports" data-node-id="{escape_xml(layout_node.id)}">']
        for port in layout_node.ports.values():
            parts.extend(self._port(port, layout_node.position.x, layout_node.position.y,
                                    layout_node.id, context))
        parts.append('</g>')
        return "\n".join(parts)

    @staticmethod
    def _port(port: LayoutPort, owner_x: float, owner_y: float, owner_id: str,
              context: _RenderContext) -> List[str]:
        colors = context.colors
        px = owner_x + port.position.x
        py = owner_y + port.position.y
        pw, ph = port.size.width, port.size.height

        data = f' data-port="{escape_xml(port.id)}"'
        if context.options.interactive:
            data += f' data-port-device="{escape_xml(owner_id)}"'

        label_x, label_y, anchor = px, py, "middle"
        if port.side == "top":
            label_y = py - PORT_LABEL_OFFSET
        elif port.side == "left":
            label_x, anchor = px - PORT_LABEL_OFFSET, "end"
        elif port.side == "right":
            label_x, anchor = px + PORT_LABEL_OFFSET, "start"
        else:
            label_y = py + PORT_LABEL_OFFSET + 4

        label_width = len(port.label) * PORT_LABEL_CHAR_WIDTH + 4
        if anchor == "middle":
            bg_x = label_x - label_width / 2
        elif anchor == "end":
            bg_x = label_x - label_width + 2
        else:
            bg_x = label_x - 2
        bg_y = label_y - PORT_LABEL_HEIGHT + 3

        return [
            f'<rect class="port"{data} x="{fmt(px - pw / 2)}" y="{fmt(py - ph / 2)}" '
            f'width="{fmt(pw)}" height="{fmt(ph)}" fill="{colors.port_fill}" '
            f'stroke="{colors.port_stroke}" stroke-width="1" rx="2" />',
            f'<rect class="port-label-bg" x="{fmt(bg_x)}" y="{fmt(bg_y)}" width="{fmt(label_width)}" '
            f'height="{PORT_LABEL_HEIGHT}" rx="2" fill="{colors.port_label_bg}" />',
            f'<text class="port-label" x="{fmt(label_x)}" y="{fmt(label_y)}" '
            f'text-anchor="{anchor}">{escape_xml(port.label)}</text>',
        ]
