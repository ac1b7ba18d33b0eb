"""
Standalone HTML pages.

Both pages are fully self-contained: SVG markup, styles and scripts are
inlined, no external JavaScript runtime is needed.
"""

from typing import Dict, List, Optional

from ...shared.infrastructure.monitoring import get_logger
from ...shared.models import ROOT_SHEET_ID, LayoutResult, NetworkGraph
from .labels import escape_xml
from .models import HTMLOptions, SheetData
from .scripts import get_hierarchical_script, get_single_view_script
from .svg import SVGRenderer
from .themes import get_theme_colors

logger = get_logger(__name__)

ROOT_SHEET_LABEL = "Overview"

_ZOOM_OUT_ICON = ('<svg width="20" height="20" fill="none" stroke="currentColor" viewBox="0 0 24 24">'
                  '<path stroke-linecap="round" stroke-width="2" d="M20 12H4"/></svg>')
_ZOOM_IN_ICON = ('<svg width="20" height="20" fill="none" stroke="currentColor" viewBox="0 0 24 24">'
                 '<path stroke-linecap="round" stroke-width="2" d="M12 4v16m8-8H4"/></svg>')
_FIT_ICON = ('<svg width="20" height="20" fill="none" stroke="currentColor" viewBox="0 0 24 24">'
             '<path stroke-linecap="round" stroke-width="2" d="M4 8V4h4M20 8V4h-4M4 16v4h4M20 16v4h-4"/></svg>')
_RESET_ICON = ('<svg width="20" height="20" fill="none" stroke="currentColor" viewBox="0 0 24 24">'
               '<path stroke-linecap="round" stroke-width="2" d="M4 4v5h5M20 20v-5h-5M5 15a8 8 0 0014 2M19 9A8 8 0 005 7"/></svg>')
_BACK_ICON = ('<svg width="20" height="20" fill="none" stroke="currentColor" viewBox="0 0 24 24">'
              '<path stroke-linecap="round" stroke-width="2" d="M15 19l-7-7 7-7"/></svg>')


def _page_styles(background: str, foreground: str) -> str:
    return f"""
* {{ box-sizing: border-box; }}
html, body {{ margin: 0; height: 100%; background: {background}; color: {foreground};
  font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; }}
body {{ display: flex; flex-direction: column; }}
.toolbar {{ display: flex; align-items: center; justify-content: space-between; gap: 12px;
  padding: 8px 16px; border-bottom: 1px solid rgba(128, 128, 128, 0.25); }}
.toolbar-title {{ font-weight: 600; font-size: 14px; }}
.toolbar-buttons {{ display: flex; align-items: center; gap: 4px; }}
.toolbar button {{ background: none; border: none; color: inherit; cursor: pointer; padding: 4px;
  border-radius: 4px; display: inline-flex; }}
.toolbar button:hover {{ background: rgba(128, 128, 128, 0.15); }}
.zoom-text {{ min-width: 48px; text-align: center; font-size: 12px; }}
.breadcrumb {{ display: flex; align-items: center; gap: 6px; font-size: 13px; }}
.breadcrumb-item {{ font: inherit; }}
.breadcrumb-sep {{ opacity: 0.5; }}
#diagram {{ flex: 1; overflow: hidden; cursor: grab; touch-action: none; }}
#diagram.dragging {{ cursor: grabbing; }}
#diagram svg {{ width: 100%; height: 100%; display: block; }}
.sheet-container {{ width: 100%; height: 100%; }}
.branding {{ position: fixed; right: 12px; bottom: 8px; font-size: 11px; opacity: 0.6;
  color: inherit; text-decoration: none; }}
"""


def _zoom_buttons() -> str:
    return (
        '<div class="toolbar-buttons">'
        f'<button id="btn-out" title="Zoom Out">{_ZOOM_OUT_ICON}</button>'
        '<span class="zoom-text" id="zoom">100%</span>'
        f'<button id="btn-in" title="Zoom In">{_ZOOM_IN_ICON}</button>'
        f'<button id="btn-fit" title="Fit">{_FIT_ICON}</button>'
        f'<button id="btn-reset" title="Reset">{_RESET_ICON}</button>'
        '</div>'
    )


def _document(title: str, styles: str, body: List[str], script: str) -> str:
    return "\n".join([
        '<!DOCTYPE html>',
        '<html lang="en">',
        '<head>',
        '<meta charset="utf-8">',
        '<meta name="viewport" content="width=device-width, initial-scale=1">',
        f'<title>{escape_xml(title)}</title>',
        f'<style>{styles}</style>',
        '</head>',
        '<body>',
        *body,
        f'<script>{script}</script>',
        '</body>',
        '</html>',
    ])


def _branding(options: HTMLOptions) -> List[str]:
    if not options.branding:
        return []
    return ['<a class="branding" href="https://shumoku.packof.me" target="_blank" rel="noopener">Made with Shumoku</a>']


def render_html(graph: NetworkGraph, layout: LayoutResult, options: Optional[HTMLOptions] = None) -> str:
    """
    Wrap one rendered diagram in a standalone page with pan/zoom controls.

    Args:
        graph: Graph to render
        layout: Its computed layout
        options: Page and SVG options

    Returns:
        Complete HTML document
    """
    options = options or HTMLOptions()
    svg = SVGRenderer(options.render).render(graph, layout)
    colors = get_theme_colors(graph.settings.theme or options.render.theme)
    title = graph.name or options.title

    body = []
    if options.toolbar:
        body.append(f'<div class="toolbar"><span class="toolbar-title">{escape_xml(title)}</span>'
                    f'{_zoom_buttons()}</div>')
    body.append(f'<div id="diagram">{svg}</div>')
    body.extend(_branding(options))

    return _document(title, _page_styles(colors.background, colors.label), body, get_single_view_script())


def render_hierarchical_html(sheets: Dict[str, SheetData], options: Optional[HTMLOptions] = None) -> str:
    """
    Render every sheet into one page with drill-down navigation.

    Only the root sheet is visible initially; the others are revealed by
    zooming into their subgraph, by the breadcrumb, or by dispatching a
    ``shumoku:navigate`` event with ``{sheetId}`` detail.

    Args:
        sheets: Sheet data keyed by sheet id; must contain ``root``
        options: Page and SVG options

    Returns:
        Complete HTML document
    """
    options = options or HTMLOptions()
    root = sheets.get(ROOT_SHEET_ID)
    if root is None:
        logger.warning("No root sheet given; using the first sheet as the overview")
        root = next(iter(sheets.values()), None)

    theme = (root.graph.settings.theme if root else None) or options.render.theme
    colors = get_theme_colors(theme)
    title = (root.graph.name if root else None) or options.title

    containers = []
    for sheet_id, sheet in sheets.items():
        renderer = SVGRenderer(options.render.model_copy(update={"sheet_id": sheet_id}))
        is_root = sheet_id == ROOT_SHEET_ID
        label = ROOT_SHEET_LABEL if is_root else (sheet.label or sheet_id)
        parent_id = None if is_root else (sheet.parent_id or _parent_of(sheet_id))
        attributes = f'class="sheet-container" data-sheet-id="{escape_xml(sheet_id)}" data-label="{escape_xml(label)}"'
        if parent_id:
            attributes += f' data-parent-id="{escape_xml(parent_id)}"'
        display = "block" if is_root else "none"
        containers.append(f'<div {attributes} style="display: {display}">'
                          f'{renderer.render(sheet.graph, sheet.layout)}</div>')

    body = []
    if options.toolbar:
        body.append(
            '<div class="toolbar">'
            f'<div class="breadcrumb"><button id="btn-back" title="Back" style="display: none">{_BACK_ICON}</button>'
            f'<nav id="breadcrumb"><span class="breadcrumb-item">{ROOT_SHEET_LABEL}</span></nav></div>'
            f'<span class="toolbar-title">{escape_xml(title)}</span>'
            f'{_zoom_buttons()}</div>'
        )
    body.append('<div id="diagram">' + "\n".join(containers) + '</div>')
    body.extend(_branding(options))

    logger.debug(f"Rendered hierarchical page with {len(sheets)} sheets")
    return _document(title, _page_styles(colors.background, colors.label), body, get_hierarchical_script())


def _parent_of(sheet_id: str) -> str:
    return sheet_id.rsplit("/", 1)[0] if "/" in sheet_id else ROOT_SHEET_ID
