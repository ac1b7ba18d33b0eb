"""
Path geometry for link rendering.

Points are ``(x, y)`` tuples in SVG user space (y grows downwards).
"""

import math
from typing import List, Optional, Sequence, Tuple

Point = Tuple[float, float]

DEFAULT_CORNER_RADIUS = 8.0
LINE_SPACING = 3.0

# Mitre joins longer than this many offsets fall back to a plain offset
MITRE_LIMIT = 4.0


def fmt(value: float) -> str:
    """Format a coordinate compactly and deterministically."""
    rounded = round(float(value), 2)
    if rounded == 0:
        return "0"
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.2f}".rstrip("0").rstrip(".")


def line_offsets(count: int, spacing: float = LINE_SPACING) -> List[float]:
    """Offsets for ``count`` parallel lines, centred on zero."""
    start = -(count - 1) * spacing / 2
    return [start + i * spacing for i in range(count)]


def _unit(a: Point, b: Point) -> Optional[Point]:
    dx, dy = b[0] - a[0], b[1] - a[1]
    length = math.hypot(dx, dy)
    if length == 0:
        return None
    return dx / length, dy / length


def perpendicular(a: Point, b: Point) -> Point:
    """Unit normal of segment ``a -> b`` (direction rotated by +90 degrees)."""
    direction = _unit(a, b)
    if direction is None:
        return 0.0, 0.0
    return -direction[1], direction[0]


def turn_signs(points: Sequence[Point]) -> List[int]:
    """
    Turn direction at every interior vertex.

    +1 turns towards the positive normal side, -1 away from it, 0 for
    collinear or degenerate vertices.
    """
    signs = []
    for i in range(1, len(points) - 1):
        d_in = _unit(points[i - 1], points[i])
        d_out = _unit(points[i], points[i + 1])
        if d_in is None or d_out is None:
            signs.append(0)
            continue
        cross = d_in[0] * d_out[1] - d_in[1] * d_out[0]
        signs.append(1 if cross > 1e-9 else -1 if cross < -1e-9 else 0)
    return signs


def offset_polyline(points: Sequence[Point], offset: float) -> List[Point]:
    """
    Shift a polyline sideways by ``offset`` with mitred joins.

    The result has exactly one vertex per input vertex.
    """
    if len(points) < 2 or offset == 0:
        return list(points)

    result = []
    last = len(points) - 1
    for i, p in enumerate(points):
        n_in = perpendicular(points[i - 1], p) if i > 0 else None
        n_out = perpendicular(p, points[i + 1]) if i < last else None

        if n_in is None or n_out is None:
            n = n_out if n_in is None else n_in
            result.append((p[0] + n[0] * offset, p[1] + n[1] * offset))
            continue

        denom = 1 + n_in[0] * n_out[0] + n_in[1] * n_out[1]
        if denom < 2 / (MITRE_LIMIT * MITRE_LIMIT):
            result.append((p[0] + n_in[0] * offset, p[1] + n_in[1] * offset))
            continue

        mx = (n_in[0] + n_out[0]) / denom
        my = (n_in[1] + n_out[1]) / denom
        result.append((p[0] + mx * offset, p[1] + my * offset))

    return result


def corner_radii(points: Sequence[Point], offset: float = 0.0,
                 base_radius: float = DEFAULT_CORNER_RADIUS) -> List[float]:
    """
    Corner radius for each interior vertex of a line offset from ``points``.

    Lines on the inside of a turn get a tighter radius and lines on the
    outside a wider one, so parallel lines stay evenly spaced.
    """
    return [base_radius - sign * offset for sign in turn_signs(points)]


def rounded_path(points: Sequence[Point], radii: Optional[Sequence[float]] = None,
                 base_radius: float = DEFAULT_CORNER_RADIUS) -> str:
    """
    SVG path data through ``points`` with quadratic rounded corners.

    Each corner radius is clamped to half the shorter adjacent segment;
    corners whose radius ends up below 1 are joined straight.
    """
    if len(points) < 2:
        return ""
    start = points[0]
    if len(points) == 2:
        end = points[1]
        return f"M {fmt(start[0])} {fmt(start[1])} L {fmt(end[0])} {fmt(end[1])}"

    if radii is None:
        radii = [base_radius] * (len(points) - 2)

    parts = [f"M {fmt(start[0])} {fmt(start[1])}"]
    for i in range(1, len(points) - 1):
        prev, curr, nxt = points[i - 1], points[i], points[i + 1]
        dist_prev = math.hypot(curr[0] - prev[0], curr[1] - prev[1])
        dist_next = math.hypot(nxt[0] - curr[0], nxt[1] - curr[1])
        radius = min(radii[i - 1], min(dist_prev, dist_next) / 2)

        if radius < 1:
            parts.append(f"L {fmt(curr[0])} {fmt(curr[1])}")
            continue

        d_prev = ((curr[0] - prev[0]) / dist_prev, (curr[1] - prev[1]) / dist_prev)
        d_next = ((nxt[0] - curr[0]) / dist_next, (nxt[1] - curr[1]) / dist_next)
        curve_start = (curr[0] - d_prev[0] * radius, curr[1] - d_prev[1] * radius)
        curve_end = (curr[0] + d_next[0] * radius, curr[1] + d_next[1] * radius)

        parts.append(f"L {fmt(curve_start[0])} {fmt(curve_start[1])}")
        parts.append(f"Q {fmt(curr[0])} {fmt(curr[1])} {fmt(curve_end[0])} {fmt(curve_end[1])}")

    end = points[-1]
    parts.append(f"L {fmt(end[0])} {fmt(end[1])}")
    return " ".join(parts)


def is_bezier_chain(points: Sequence[Point]) -> bool:
    """Whether ``points`` form start + (control, control, end) triples."""
    return len(points) >= 4 and (len(points) - 1) % 3 == 0


def cubic_path(points: Sequence[Point]) -> str:
    """SVG path data for a chain of cubic Bezier segments."""
    parts = [f"M {fmt(points[0][0])} {fmt(points[0][1])}"]
    for i in range(1, len(points), 3):
        c1, c2, end = points[i], points[i + 1], points[i + 2]
        parts.append(
            f"C {fmt(c1[0])} {fmt(c1[1])} {fmt(c2[0])} {fmt(c2[1])} {fmt(end[0])} {fmt(end[1])}"
        )
    return " ".join(parts)


def midpoint(points: Sequence[Point], bezier: bool = False) -> Point:
    """Label anchor point halfway along a link."""
    if not points:
        return 0.0, 0.0
    if bezier and len(points) == 4:
        t = 0.5
        mt = 1 - t
        coefficients = (mt ** 3, 3 * mt * mt * t, 3 * mt * t * t, t ** 3)
        return (
            sum(c * p[0] for c, p in zip(coefficients, points)),
            sum(c * p[1] for c, p in zip(coefficients, points)),
        )
    if len(points) == 1:
        return points[0]
    mid = len(points) // 2
    a, b = points[mid - 1], points[mid]
    return (a[0] + b[0]) / 2, (a[1] + b[1]) / 2
