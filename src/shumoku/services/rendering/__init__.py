"""
Rendering service for Shumoku.

Produces deterministic SVG documents and self-contained HTML pages from
a graph and its layout.
"""

from .html import render_hierarchical_html, render_html
from .links import LinkPainter, effective_link_type, line_count
from .models import HTMLOptions, RenderMode, RenderOptions, SheetData
from .svg import SVGRenderer
from .themes import DARK_THEME, LIGHT_THEME, ThemeColors, get_theme_colors, vlan_color

__all__ = [
    "SVGRenderer",
    "LinkPainter",
    "RenderOptions",
    "RenderMode",
    "HTMLOptions",
    "SheetData",
    "ThemeColors",
    "LIGHT_THEME",
    "DARK_THEME",
    "get_theme_colors",
    "vlan_color",
    "effective_link_type",
    "line_count",
    "render_html",
    "render_hierarchical_html",
]
