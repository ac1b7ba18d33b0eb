"""Inline JavaScript for standalone HTML pages.

Two page flavours share the pan/zoom code:

- single: one SVG, the viewBox lives in ``vb`` with the original in ``origVb``
- hierarchical: one SVG per sheet, viewBoxes live in ``sheetViewBoxes[currentSheet]``

The hierarchical flavour adds zoom navigation between sheets. Its
constants mirror ``shumoku.services.navigation`` so the browser and the
Python state machine behave identically.
"""

from ..navigation.geometry import (
    ANIMATION_DURATION_MS, CENTER_DISTANCE_FACTOR, DEBOUNCE_MS, DOUBLE_CLICK_MS,
    FIT_RATIO, PARENT_CONTEXT_FACTOR, SHEET_SWITCH_PROGRESS, ZOOM_IN_AREA_RATIO, ZOOM_IN_PADDING,
    ZOOM_IN_SCALE_THRESHOLD, ZOOM_OUT_COVERAGE_RATIO, ZOOM_OUT_SCALE_THRESHOLD,
)

WHEEL_FACTOR = 1.2
MIN_SCALE = 0.1
MAX_SCALE = 10


def _view_box_lookup(hierarchical: bool) -> str:
    if hierarchical:
        return "var vb = sheetViewBoxes[currentSheet]; if (!vb) return;"
    return "var vb = view;"


def get_pan_zoom_script(hierarchical: bool = False) -> str:
    """Wheel, drag, pinch and toolbar handlers.

    Args:
        hierarchical: Read the viewBox of the visible sheet instead of a single one

    Returns:
        JavaScript source (no surrounding ``<script>`` tag)
    """
    lookup = _view_box_lookup(hierarchical)
    busy = "zoomNav.isAnimating" if hierarchical else "false"
    settle = "scheduleSettle(e.clientX, e.clientY);" if hierarchical else ""
    pinch_settle = "scheduleSettle(pinch.cx, pinch.cy);" if hierarchical else ""

    return f"""
var drag = {{ active: false, x: 0, y: 0, vx: 0, vy: 0 }};
var pinch = {{ active: false, dist: 0, cx: 0, cy: 0 }};

function applyZoom(vb, factor, fx, fy) {{
  var nw = vb.w / factor, nh = vb.h / factor;
  var scale = vb.origW / nw;
  if (scale < {MIN_SCALE} || scale > {MAX_SCALE}) return false;
  var px = vb.x + vb.w * fx, py = vb.y + vb.h * fy;
  vb.w = nw; vb.h = nh; vb.x = px - nw * fx; vb.y = py - nh * fy;
  updateViewBox();
  return true;
}}

function zoom(factor) {{
  {lookup}
  applyZoom(vb, factor, 0.5, 0.5);
}}

function fitView() {{
  {lookup}
  var cw = container.clientWidth || 800, ch = container.clientHeight || 600;
  var scale = Math.min(cw / vb.origW, ch / vb.origH) * {FIT_RATIO};
  vb.w = cw / scale; vb.h = ch / scale;
  vb.x = vb.origX + (vb.origW - vb.w) / 2;
  vb.y = vb.origY + (vb.origH - vb.h) / 2;
  updateViewBox();
}}

function resetView() {{
  {lookup}
  vb.x = vb.origX; vb.y = vb.origY; vb.w = vb.origW; vb.h = vb.origH;
  updateViewBox();
}}

container.addEventListener('wheel', function(e) {{
  e.preventDefault();
  if ({busy}) return;
  {lookup}
  var rect = container.getBoundingClientRect();
  var factor = e.deltaY > 0 ? 1 / {WHEEL_FACTOR} : {WHEEL_FACTOR};
  applyZoom(vb, factor, (e.clientX - rect.left) / rect.width, (e.clientY - rect.top) / rect.height);
  {settle}
}}, {{ passive: false }});

container.addEventListener('mousedown', function(e) {{
  if (e.button !== 0 || {busy}) return;
  {lookup}
  drag = {{ active: true, x: e.clientX, y: e.clientY, vx: vb.x, vy: vb.y }};
  container.classList.add('dragging');
}});

document.addEventListener('mousemove', function(e) {{
  if (!drag.active) return;
  {lookup}
  vb.x = drag.vx - (e.clientX - drag.x) * vb.w / container.clientWidth;
  vb.y = drag.vy - (e.clientY - drag.y) * vb.h / container.clientHeight;
  updateViewBox();
}});

document.addEventListener('mouseup', function() {{
  drag.active = false;
  container.classList.remove('dragging');
}});

function touchDistance(t) {{
  return Math.hypot(t[1].clientX - t[0].clientX, t[1].clientY - t[0].clientY);
}}

container.addEventListener('touchstart', function(e) {{
  if ({busy}) {{ e.preventDefault(); return; }}
  {lookup}
  if (e.touches.length === 1) {{
    drag = {{ active: true, x: e.touches[0].clientX, y: e.touches[0].clientY, vx: vb.x, vy: vb.y }};
  }} else if (e.touches.length === 2) {{
    drag.active = false;
    pinch = {{
      active: true,
      dist: touchDistance(e.touches),
      cx: (e.touches[0].clientX + e.touches[1].clientX) / 2,
      cy: (e.touches[0].clientY + e.touches[1].clientY) / 2
    }};
  }}
}}, {{ passive: false }});

container.addEventListener('touchmove', function(e) {{
  e.preventDefault();
  if ({busy}) return;
  {lookup}
  if (pinch.active && e.touches.length === 2) {{
    var dist = touchDistance(e.touches);
    var rect = container.getBoundingClientRect();
    pinch.cx = (e.touches[0].clientX + e.touches[1].clientX) / 2;
    pinch.cy = (e.touches[0].clientY + e.touches[1].clientY) / 2;
    applyZoom(vb, dist / pinch.dist, (pinch.cx - rect.left) / rect.width, (pinch.cy - rect.top) / rect.height);
    pinch.dist = dist;
  }} else if (drag.active && e.touches.length === 1) {{
    vb.x = drag.vx - (e.touches[0].clientX - drag.x) * vb.w / container.clientWidth;
    vb.y = drag.vy - (e.touches[0].clientY - drag.y) * vb.h / container.clientHeight;
    updateViewBox();
  }}
}}, {{ passive: false }});

container.addEventListener('touchend', function(e) {{
  if (pinch.active && e.touches.length < 2) {{
    pinch.active = false;
    {pinch_settle}
  }}
  if (e.touches.length === 0) drag.active = false;
}});

var btnIn = document.getElementById('btn-in');
var btnOut = document.getElementById('btn-out');
var btnFit = document.getElementById('btn-fit');
var btnReset = document.getElementById('btn-reset');
if (btnIn) btnIn.addEventListener('click', function() {{ zoom({WHEEL_FACTOR}); }});
if (btnOut) btnOut.addEventListener('click', function() {{ zoom(1 / {WHEEL_FACTOR}); }});
if (btnFit) btnFit.addEventListener('click', fitView);
if (btnReset) btnReset.addEventListener('click', resetView);
"""


def get_single_view_script() -> str:
    """Script body for a single-sheet page."""
    return """
(function() {
var container = document.getElementById('diagram');
var svg = container.querySelector('svg');
var parts = (svg.getAttribute('viewBox') || '0 0 800 600').split(/[\\s,]+/).map(Number);
var view = { x: parts[0], y: parts[1], w: parts[2], h: parts[3],
             origX: parts[0], origY: parts[1], origW: parts[2], origH: parts[3] };
svg.removeAttribute('width');
svg.removeAttribute('height');

function updateViewBox() {
  svg.setAttribute('viewBox', view.x + ' ' + view.y + ' ' + view.w + ' ' + view.h);
  var label = document.getElementById('zoom');
  if (label) label.textContent = Math.round(view.origW / view.w * 100) + '%';
}
""" + get_pan_zoom_script(hierarchical=False) + """
fitView();
})();
"""


def get_zoom_navigation_script() -> str:
    """Zoom-driven sheet switching: triggers, animation and the 80% switch."""
    return f"""
var zoomNav = {{ isAnimating: false, animationId: null, settleTimer: null, lastX: 0, lastY: 0,
                lastClick: null }};

function easeOutCubic(t) {{ return 1 - Math.pow(1 - t, 3); }}

function lerpViewBox(from, to, t) {{
  return {{
    x: from.x + (to.x - from.x) * t,
    y: from.y + (to.y - from.y) * t,
    w: from.w + (to.w - from.w) * t,
    h: from.h + (to.h - from.h) * t
  }};
}}

function pickSubgraphTarget(clientX, clientY) {{
  var elements = document.elementsFromPoint(clientX, clientY);
  for (var i = 0; i < elements.length; i++) {{
    var sg = elements[i].closest ? elements[i].closest('.subgraph[data-has-sheet]') : null;
    if (!sg) continue;
    var sheetId = sg.getAttribute('data-sheet-id');
    if (!sheetId || !sheetViewBoxes[sheetId]) return null;
    try {{
      return {{ sheetId: sheetId, bounds: JSON.parse(sg.getAttribute('data-bounds')) }};
    }} catch (err) {{
      return null;
    }}
  }}
  return null;
}}

function shouldTriggerZoomIn(vb, bounds) {{
  if (vb.origW / vb.w < {ZOOM_IN_SCALE_THRESHOLD}) return false;
  if ((vb.w * vb.h) / (bounds.width * bounds.height) > {ZOOM_IN_AREA_RATIO}) return false;
  var dist = Math.hypot(vb.x + vb.w / 2 - (bounds.x + bounds.width / 2),
                        vb.y + vb.h / 2 - (bounds.y + bounds.height / 2));
  return dist <= Math.hypot(bounds.width, bounds.height) * {CENTER_DISTANCE_FACTOR};
}}

function shouldTriggerZoomOut(vb, sheetId) {{
  if (sheetId === 'root' || !sheetParents[sheetId]) return false;
  if (vb.origW / vb.w > {ZOOM_OUT_SCALE_THRESHOLD}) return false;
  return (vb.origW * vb.origH) / (vb.w * vb.h) < {ZOOM_OUT_COVERAGE_RATIO};
}}

function fitSheet(sheetId) {{
  var vb = sheetViewBoxes[sheetId];
  if (!vb) return;
  var cw = container.clientWidth || 800, ch = container.clientHeight || 600;
  var scale = Math.min(cw / vb.origW, ch / vb.origH) * {FIT_RATIO};
  vb.w = cw / scale; vb.h = ch / scale;
  vb.x = vb.origX + (vb.origW - vb.w) / 2;
  vb.y = vb.origY + (vb.origH - vb.h) / 2;
}}

function animateTo(vb, to, onSwitch) {{
  if (zoomNav.isAnimating) return;
  zoomNav.isAnimating = true;
  var start = performance.now();
  var from = {{ x: vb.x, y: vb.y, w: vb.w, h: vb.h }};
  var switched = false;

  function step() {{
    var progress = Math.min((performance.now() - start) / {ANIMATION_DURATION_MS}, 1);
    var current = lerpViewBox(from, to, easeOutCubic(progress));
    vb.x = current.x; vb.y = current.y; vb.w = current.w; vb.h = current.h;
    updateViewBox();
    if (!switched && progress >= {SHEET_SWITCH_PROGRESS}) {{
      switched = true;
      onSwitch();
    }}
    if (progress < 1) {{
      zoomNav.animationId = requestAnimationFrame(step);
    }} else {{
      zoomNav.isAnimating = false;
      zoomNav.animationId = null;
    }}
  }}
  zoomNav.animationId = requestAnimationFrame(step);
}}

function zoomIntoTarget(target) {{
  var vb = sheetViewBoxes[currentSheet];
  var b = target.bounds;
  var to = {{
    x: b.x - b.width * {ZOOM_IN_PADDING},
    y: b.y - b.height * {ZOOM_IN_PADDING},
    w: b.width * (1 + {ZOOM_IN_PADDING} * 2),
    h: b.height * (1 + {ZOOM_IN_PADDING} * 2)
  }};
  animateTo(vb, to, function() {{
    fitSheet(target.sheetId);
    showSheet(target.sheetId);
  }});
}}

function positionParentViewBox(parentId, childId) {{
  var vb = sheetViewBoxes[parentId];
  var el = container.querySelector('.sheet-container[data-sheet-id="' + parentId + '"] '
                                   + '.subgraph[data-sheet-id="' + childId + '"]');
  if (!vb || !el) {{ fitSheet(parentId); return; }}
  var b = JSON.parse(el.getAttribute('data-bounds'));
  var cw = container.clientWidth || 800, ch = container.clientHeight || 600;
  var tw = b.width * {PARENT_CONTEXT_FACTOR}, th = b.height * {PARENT_CONTEXT_FACTOR};
  var aspect = cw / ch;
  var w = tw / th > aspect ? tw : th * aspect;
  var h = tw / th > aspect ? tw / aspect : th;
  vb.x = b.x + b.width / 2 - w / 2; vb.y = b.y + b.height / 2 - h / 2;
  vb.w = w; vb.h = h;
}}

function zoomOutToParent() {{
  var vb = sheetViewBoxes[currentSheet];
  var childId = currentSheet;
  var parentId = sheetParents[currentSheet];
  animateTo(vb, {{ x: vb.origX, y: vb.origY, w: vb.origW, h: vb.origH }}, function() {{
    positionParentViewBox(parentId, childId);
    showSheet(parentId);
  }});
}}

function checkTransitions() {{
  zoomNav.settleTimer = null;
  if (zoomNav.isAnimating) return;
  var vb = sheetViewBoxes[currentSheet];
  if (!vb) return;
  var target = pickSubgraphTarget(zoomNav.lastX, zoomNav.lastY);
  if (target && shouldTriggerZoomIn(vb, target.bounds)) {{
    zoomIntoTarget(target);
  }} else if (shouldTriggerZoomOut(vb, currentSheet)) {{
    zoomOutToParent();
  }}
}}

function scheduleSettle(x, y) {{
  zoomNav.lastX = x; zoomNav.lastY = y;
  if (zoomNav.settleTimer) clearTimeout(zoomNav.settleTimer);
  zoomNav.settleTimer = setTimeout(checkTransitions, {DEBOUNCE_MS});
}}

container.addEventListener('click', function(e) {{
  if (zoomNav.isAnimating) return;
  var target = pickSubgraphTarget(e.clientX, e.clientY);
  var now = performance.now();
  var last = zoomNav.lastClick;
  zoomNav.lastClick = target ? {{ sheetId: target.sheetId, time: now }} : null;
  if (!target || !last || last.sheetId !== target.sheetId || now - last.time > {DOUBLE_CLICK_MS}) return;
  zoomNav.lastClick = null;
  var vb = sheetViewBoxes[currentSheet];
  if (vb && shouldTriggerZoomIn(vb, target.bounds)) zoomIntoTarget(target);
}});

function cancelZoomNavigation() {{
  if (zoomNav.animationId !== null) cancelAnimationFrame(zoomNav.animationId);
  if (zoomNav.settleTimer) clearTimeout(zoomNav.settleTimer);
  zoomNav.animationId = null;
  zoomNav.settleTimer = null;
  zoomNav.isAnimating = false;
}}
window.addEventListener('pagehide', cancelZoomNavigation);
"""


def get_hierarchical_script() -> str:
    """Script body for a multi-sheet page with breadcrumb navigation."""
    return """
(function() {
var container = document.getElementById('diagram');
var sheetViewBoxes = {};
var sheetParents = {};
var sheetLabels = {};
var currentSheet = 'root';

container.querySelectorAll('.sheet-container').forEach(function(el) {
  var id = el.getAttribute('data-sheet-id');
  var svg = el.querySelector('svg');
  var parts = (svg.getAttribute('viewBox') || '0 0 800 600').split(/[\\s,]+/).map(Number);
  svg.removeAttribute('width');
  svg.removeAttribute('height');
  sheetViewBoxes[id] = { x: parts[0], y: parts[1], w: parts[2], h: parts[3],
                         origX: parts[0], origY: parts[1], origW: parts[2], origH: parts[3] };
  sheetParents[id] = el.getAttribute('data-parent-id') || null;
  sheetLabels[id] = el.getAttribute('data-label') || id;
});

function updateViewBox() {
  var vb = sheetViewBoxes[currentSheet];
  var el = container.querySelector('.sheet-container[data-sheet-id="' + currentSheet + '"] svg');
  if (!vb || !el) return;
  el.setAttribute('viewBox', vb.x + ' ' + vb.y + ' ' + vb.w + ' ' + vb.h);
  var label = document.getElementById('zoom');
  if (label) label.textContent = Math.round(vb.origW / vb.w * 100) + '%';
}

function renderBreadcrumb() {
  var nav = document.getElementById('breadcrumb');
  if (!nav) return;
  var trail = [];
  for (var id = currentSheet; id; id = sheetParents[id]) trail.unshift(id);
  nav.innerHTML = '';
  trail.forEach(function(id, index) {
    if (index > 0) {
      var sep = document.createElement('span');
      sep.className = 'breadcrumb-sep';
      sep.textContent = '/';
      nav.appendChild(sep);
    }
    var item = document.createElement(index === trail.length - 1 ? 'span' : 'button');
    item.className = 'breadcrumb-item';
    item.textContent = sheetLabels[id];
    if (index < trail.length - 1) {
      item.addEventListener('click', function() { navigateTo(id); });
    }
    nav.appendChild(item);
  });
  var back = document.getElementById('btn-back');
  if (back) back.style.display = sheetParents[currentSheet] ? '' : 'none';
}

function showSheet(id) {
  if (!sheetViewBoxes[id]) return;
  container.querySelectorAll('.sheet-container').forEach(function(el) {
    el.style.display = el.getAttribute('data-sheet-id') === id ? 'block' : 'none';
  });
  currentSheet = id;
  updateViewBox();
  renderBreadcrumb();
}

function navigateTo(id) {
  if (zoomNav.isAnimating || !sheetViewBoxes[id]) return;
  fitSheet(id);
  showSheet(id);
}
""" + get_zoom_navigation_script() + get_pan_zoom_script(hierarchical=True) + """
var backButton = document.getElementById('btn-back');
if (backButton) backButton.addEventListener('click', function() {
  if (sheetParents[currentSheet]) navigateTo(sheetParents[currentSheet]);
});

document.addEventListener('shumoku:navigate', function(e) {
  if (e.detail && e.detail.sheetId) navigateTo(e.detail.sheetId);
});

navigateTo('root');
})();
"""
