"""
Text helpers: escaping, hashing and label placement.

Label backgrounds are sized from character counts so output does not
depend on font metrics.
"""

import math
import re
from typing import List, Sequence, Tuple

from .geometry import Point, fmt

_MARKUP = re.compile(r"</?b>|</?strong>|<br\s*/?>", re.IGNORECASE)

ENDPOINT_LABEL_OFFSET = 30
ENDPOINT_LABEL_PERP = 20


def escape_xml(text) -> str:
    """Escape text for use in SVG content and attribute values."""
    return (
        str(text)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def string_hash(text: str) -> int:
    """Deterministic non-negative 32-bit rolling hash (``h * 31 + c``)."""
    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return abs(value)


def clean_label(line: str) -> Tuple[str, bool]:
    """Strip inline markup; report whether the line asked for bold."""
    lowered = line.lower()
    bold = "<b>" in lowered or "<strong>" in lowered
    return _MARKUP.sub("", line), bold


def endpoint_label_position(points: Sequence[Point], at_start: bool,
                            node_center_x: float, port_name: str) -> Tuple[float, float, str]:
    """
    Place an endpoint label near the end of a link.

    Vertical-dominant segments push the label sideways towards the side
    the port sits on relative to its node centre (a hash of the port name
    decides for centred ports). Horizontal-dominant segments put the label
    below the line, anchored towards the link's interior.

    Returns:
        ``(x, y, text_anchor)``
    """
    endpoint = points[0] if at_start else points[-1]
    neighbour = points[1] if at_start else points[-2]

    dx = neighbour[0] - endpoint[0]
    dy = neighbour[1] - endpoint[1]
    length = math.hypot(dx, dy)
    nx = dx / length if length > 0 else 0.0
    ny = dy / length if length > 0 else 1.0

    if abs(dy) > abs(dx):
        port_offset = endpoint[0] - node_center_x
        if abs(port_offset) > 5:
            side = 1.0 if port_offset > 0 else -1.0
        else:
            side = (1.0 if string_hash(port_name) % 2 == 0 else -1.0) * 0.2

        x = endpoint[0] + ENDPOINT_LABEL_PERP * side
        y = endpoint[1] + ny * ENDPOINT_LABEL_OFFSET
        label_dx = x - endpoint[0]
        anchor = "middle" if abs(label_dx) <= 8 else ("start" if label_dx > 0 else "end")
        return x, y, anchor

    x = endpoint[0]
    y = endpoint[1] + ENDPOINT_LABEL_PERP
    anchor = "end" if nx < 0 else "start"
    return x, y, anchor


def label_with_background(lines: List[str], x: float, y: float, anchor: str, *,
                          text_class: str, fill: str, stroke: str = "none",
                          char_width: float = 4.8, line_height: float = 11,
                          padding: float = 2) -> str:
    """
    Text lines with an opaque rounded background behind them.

    ``y`` is the baseline of the first line.
    """
    if not lines:
        return ""

    width = max(len(line) for line in lines) * char_width + padding * 2
    height = len(lines) * line_height + padding * 2

    if anchor == "middle":
        rect_x = x - width / 2
    elif anchor == "end":
        rect_x = x - width + padding
    else:
        rect_x = x - padding
    rect_y = y - line_height + padding

    parts = [
        f'<rect class="{text_class}-bg" x="{fmt(rect_x)}" y="{fmt(rect_y)}" '
        f'width="{fmt(width)}" height="{fmt(height)}" rx="2" fill="{fill}" '
        f'stroke="{stroke}" stroke-width="0.5" />'
    ]
    for i, line in enumerate(lines):
        parts.append(
            f'<text class="{text_class}" x="{fmt(x)}" y="{fmt(y + i * line_height)}" '
            f'text-anchor="{anchor}">{escape_xml(line)}</text>'
        )
    return "\n".join(parts)
