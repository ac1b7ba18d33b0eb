"""
Node outline shapes.

Every shape is drawn from the node centre ``(x, y)`` and size ``(w, h)``.
"""

from .geometry import fmt


def render_shape(shape: str, x: float, y: float, w: float, h: float,
                 fill: str, stroke: str, stroke_width: float = 1,
                 dasharray: str = "") -> str:
    """Exact SVG primitives for one node outline."""
    paint = f'fill="{fill}" stroke="{stroke}" stroke-width="{fmt(stroke_width)}"'
    if dasharray:
        paint += f' stroke-dasharray="{dasharray}"'

    half_w = w / 2
    half_h = h / 2
    left, top = x - half_w, y - half_h

    if shape == "rect":
        return f'<rect x="{fmt(left)}" y="{fmt(top)}" width="{fmt(w)}" height="{fmt(h)}" {paint} />'

    if shape == "rounded":
        return (f'<rect x="{fmt(left)}" y="{fmt(top)}" width="{fmt(w)}" height="{fmt(h)}" '
                f'rx="8" ry="8" {paint} />')

    if shape == "circle":
        return f'<circle cx="{fmt(x)}" cy="{fmt(y)}" r="{fmt(min(half_w, half_h))}" {paint} />'

    if shape == "diamond":
        points = _points((x, top), (x + half_w, y), (x, y + half_h), (left, y))
        return f'<polygon points="{points}" {paint} />'

    if shape == "hexagon":
        hx = half_w * 0.866
        points = _points(
            (left, y), (x - hx, top), (x + hx, top),
            (x + half_w, y), (x + hx, y + half_h), (x - hx, y + half_h),
        )
        return f'<polygon points="{points}" {paint} />'

    if shape == "cylinder":
        ellipse_h = h * 0.15
        body_top = top + ellipse_h
        body_bottom = y + half_h - ellipse_h
        edge = f'stroke="{stroke}" stroke-width="{fmt(stroke_width)}"'
        return "\n".join([
            '<g class="cylinder">',
            f'<ellipse cx="{fmt(x)}" cy="{fmt(body_bottom)}" rx="{fmt(half_w)}" ry="{fmt(ellipse_h)}" {paint} />',
            f'<rect x="{fmt(left)}" y="{fmt(body_top)}" width="{fmt(w)}" height="{fmt(h - ellipse_h * 2)}" fill="{fill}" stroke="none" />',
            f'<line x1="{fmt(left)}" y1="{fmt(body_top)}" x2="{fmt(left)}" y2="{fmt(body_bottom)}" {edge} />',
            f'<line x1="{fmt(x + half_w)}" y1="{fmt(body_top)}" x2="{fmt(x + half_w)}" y2="{fmt(body_bottom)}" {edge} />',
            f'<ellipse cx="{fmt(x)}" cy="{fmt(body_top)}" rx="{fmt(half_w)}" ry="{fmt(ellipse_h)}" {paint} />',
            '</g>',
        ])

    if shape == "stadium":
        return (f'<rect x="{fmt(left)}" y="{fmt(top)}" width="{fmt(w)}" height="{fmt(h)}" '
                f'rx="{fmt(half_h)}" ry="{fmt(half_h)}" {paint} />')

    if shape == "trapezoid":
        indent = w * 0.15
        points = _points(
            (left + indent, top), (x + half_w - indent, top),
            (x + half_w, y + half_h), (left, y + half_h),
        )
        return f'<polygon points="{points}" {paint} />'

    return (f'<rect x="{fmt(left)}" y="{fmt(top)}" width="{fmt(w)}" height="{fmt(h)}" '
            f'rx="4" ry="4" {paint} />')


def _points(*pairs) -> str:
    return " ".join(f"{fmt(px)},{fmt(py)}" for px, py in pairs)
