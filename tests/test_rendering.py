"""
Tests for SVG and HTML rendering.
"""

import pytest

from shumoku.services.rendering import (
    HTMLOptions, RenderOptions, SheetData, SVGRenderer, effective_link_type,
    line_count, render_hierarchical_html, render_html, vlan_color,
)
from shumoku.services.rendering.geometry import (
    corner_radii, fmt, line_offsets, offset_polyline, rounded_path,
)
from shumoku.services.rendering.icons import fit_icon
from shumoku.services.rendering.labels import clean_label, escape_xml, string_hash
from shumoku.services.rendering.shapes import render_shape
from shumoku.shared.models import (
    Bounds, ExportConnector, LayoutPort, LayoutSubgraph, Link,
    NetworkGraph, Node, Position, Subgraph,
)


def link_paths(svg: str) -> int:
    return svg.count('class="link"')


# === Geometry and text helpers ===

class TestGeometry:

    def test_fmt(self):
        assert fmt(1.0) == "1"
        assert fmt(1.235) == "1.24"
        assert fmt(-0.001) == "0"
        assert fmt(12.5) == "12.5"

    def test_line_offsets_are_centred(self):
        assert line_offsets(1) == [0]
        assert line_offsets(5) == [-6, -3, 0, 3, 6]
        assert line_offsets(2) == [-1.5, 1.5]

    def test_offset_straight_line(self):
        assert offset_polyline([(0, 0), (10, 0)], 3) == [(0, 3), (10, 3)]

    def test_offset_keeps_vertex_count(self):
        points = [(0, 0), (20, 0), (20, 20), (40, 20)]
        assert len(offset_polyline(points, 3)) == len(points)

    def test_inner_lines_turn_tighter(self):
        points = [(0, 0), (10, 0), (10, 10)]
        assert corner_radii(points, 3, 8) == [5]
        assert corner_radii(points, -3, 8) == [11]
        assert corner_radii(points, 0, 8) == [8]

    def test_rounded_path(self):
        assert rounded_path([(0, 0), (10, 0)]) == "M 0 0 L 10 0"
        assert rounded_path([(0, 0), (20, 0), (20, 20)], [8]) == "M 0 0 L 12 0 Q 20 0 20 8 L 20 20"

    def test_tiny_corner_is_straight(self):
        assert rounded_path([(0, 0), (1, 0), (1, 1)], [8]) == "M 0 0 L 1 0 L 1 1"


class TestText:

    def test_escape_xml(self):
        assert escape_xml('<a & "b">') == "&lt;a &amp; &quot;b&quot;&gt;"

    def test_clean_label(self):
        assert clean_label("<b>Core</b>") == ("Core", True)
        assert clean_label("plain") == ("plain", False)

    def test_string_hash(self):
        assert string_hash("") == 0
        assert string_hash("a") == 97
        assert string_hash("ab") == 97 * 31 + 98

    def test_vlan_color(self):
        assert vlan_color([10]) == "#0284c7"
        assert vlan_color([10, 20]) == "#7c3aed"
        assert vlan_color([]) is None
        assert vlan_color(None) is None

    def test_fit_icon(self):
        assert fit_icon(1.0, 200) == (40, 40)
        assert fit_icon(2.0, 200) == (80, 40)
        assert fit_icon(2.0, 60) == (60, 30)


class TestLinkStyle:

    def test_line_count(self):
        assert line_count("1G") == 1
        assert line_count("40G") == 4
        assert line_count("100G") == 5
        assert line_count(None) == 1

    def test_type_from_redundancy(self):
        assert effective_link_type(Link(**{"from": "a", "to": "b", "redundancy": "mlag"})) == "double"
        assert effective_link_type(Link(**{"from": "a", "to": "b", "redundancy": "stack"})) == "thick"
        assert effective_link_type(Link(**{"from": "a", "to": "b"})) == "solid"

    def test_explicit_type_wins(self):
        link = Link(**{"from": "a", "to": "b", "redundancy": "ha", "type": "dashed"})
        assert effective_link_type(link) == "dashed"


class TestShapes:

    def test_circle(self):
        assert render_shape("circle", 0, 0, 40, 20, "#fff", "#000").startswith('<circle cx="0" cy="0" r="10"')

    def test_diamond(self):
        svg = render_shape("diamond", 0, 0, 40, 20, "#fff", "#000")
        assert svg.startswith('<polygon points="0,-10 20,0 0,10 -20,0"')

    def test_cylinder_is_grouped(self):
        assert render_shape("cylinder", 0, 0, 40, 40, "#fff", "#000").count("<ellipse") == 2

    def test_unknown_shape_falls_back(self):
        assert 'rx="4"' in render_shape("blob", 0, 0, 40, 20, "#fff", "#000")


# === SVG renderer ===

class TestSVGRenderer:

    @pytest.mark.parametrize("bandwidth,expected", [("1G", 1), ("10G", 2), ("25G", 3), ("40G", 4), ("100G", 5), (None, 1)])
    def test_parallel_lines_per_bandwidth(self, two_node_graph, layout_for, bandwidth, expected):
        graph = two_node_graph(bandwidth=bandwidth)
        svg = SVGRenderer().render(graph, layout_for(graph))
        assert link_paths(svg) == expected
        assert svg.count('class="link-hit-area"') == 1

    def test_render_is_deterministic(self, two_node_graph, layout_for):
        graph = two_node_graph(bandwidth="10G", vlan=[10], label="uplink")
        layout = layout_for(graph, points=[(100, 140), (100, 200), (300, 200), (300, 140)])
        before = graph.to_dict()

        first = SVGRenderer().render(graph, layout)
        second = SVGRenderer().render(graph, layout)

        assert first == second
        assert graph.to_dict() == before

    def test_vlan_colours_link(self, two_node_graph, layout_for):
        graph = two_node_graph(vlan=[10])
        svg = SVGRenderer().render(graph, layout_for(graph))
        assert 'stroke="#0284c7"' in svg
        assert "VLAN 10" in svg

    def test_style_stroke_overrides_vlan(self, two_node_graph, layout_for):
        graph = two_node_graph(vlan=[10], style={"stroke": "#123456"})
        svg = SVGRenderer().render(graph, layout_for(graph))
        assert 'stroke="#123456"' in svg
        assert 'stroke="#0284c7"' not in svg

    def test_arrow_markers(self, two_node_graph, layout_for):
        graph = two_node_graph(arrow="both")
        svg = SVGRenderer().render(graph, layout_for(graph))
        assert 'marker-end="url(#arrow)"' in svg
        assert 'marker-start="url(#arrow)"' in svg

    def test_double_link(self, two_node_graph, layout_for):
        graph = two_node_graph(redundancy="vpc")
        svg = SVGRenderer().render(graph, layout_for(graph))
        assert 'class="link-double-outer"' in svg
        assert 'class="link-double-inner"' in svg
        assert link_paths(svg) == 1

    def test_invisible_link_keeps_hit_area(self, two_node_graph, layout_for):
        graph = two_node_graph(type="invisible")
        svg = SVGRenderer().render(graph, layout_for(graph))
        assert link_paths(svg) == 0
        assert svg.count('class="link-hit-area"') == 1

    def test_endpoint_ip_label(self, layout_for):
        graph = NetworkGraph(
            nodes=[Node(id="a"), Node(id="b")],
            links=[Link(**{"id": "l1", "from": {"node": "a", "port": "eth0", "ip": "10.0.0.1/30"}, "to": "b"})],
        )
        svg = SVGRenderer().render(graph, layout_for(graph))
        assert "10.0.0.1/30" in svg
        assert 'class="endpoint-label"' in svg

    def test_fallback_view_box(self, two_node_graph, layout_for):
        graph = two_node_graph()
        layout = layout_for(graph, bounds=Bounds(x=0, y=0, width=0, height=0))
        svg = SVGRenderer().render(graph, layout)
        assert 'viewBox="0 0 800 600"' in svg

    def test_layer_order(self, two_node_graph, layout_for):
        graph = two_node_graph()
        layout = layout_for(graph)
        layout.nodes["a"].ports["eth0"] = LayoutPort(id="a:eth0", label="eth0", position=Position(x=0, y=40))
        svg = SVGRenderer().render(graph, layout)

        order = [svg.index(f'<g class="{layer}">') for layer in ("subgraphs", "links", "nodes", "ports")]
        assert order == sorted(order)

    def test_ports_and_labels(self, two_node_graph, layout_for):
        graph = two_node_graph()
        layout = layout_for(graph)
        layout.nodes["a"].ports["eth0"] = LayoutPort(
            id="a:eth0", label="eth0", position=Position(x=70, y=0), side="right",
        )
        svg = SVGRenderer().render(graph, layout)
        assert '<rect class="port" data-port="a:eth0"' in svg
        assert 'class="port-label-bg"' in svg
        assert 'text-anchor="start">eth0</text>' in svg

    def test_no_legend_by_default(self, two_node_graph, layout_for):
        graph = two_node_graph(bandwidth="10G")
        svg = SVGRenderer().render(graph, layout_for(graph))
        assert 'class="legend"' not in svg
        assert 'width="600"' in svg

    def test_legend_grows_canvas(self, two_node_graph, layout_for):
        graph = two_node_graph(bandwidth="10G")
        graph.settings.legend = True
        svg = SVGRenderer().render(graph, layout_for(graph))
        assert 'class="legend"' in svg
        assert 'width="620"' in svg
        assert ">10G</text>" in svg

    def test_dark_theme(self, two_node_graph, layout_for):
        graph = two_node_graph()
        graph.settings.theme = "dark"
        svg = SVGRenderer().render(graph, layout_for(graph))
        assert 'style="background: #1e293b"' in svg

    def test_option_theme_used_when_graph_has_none(self, two_node_graph, layout_for):
        graph = two_node_graph()
        svg = SVGRenderer(RenderOptions(theme="dark")).render(graph, layout_for(graph))
        assert 'style="background: #1e293b"' in svg

    def test_node_labels_and_icon(self, layout_for):
        graph = NetworkGraph(nodes=[Node(id="core", label=["<b>Core</b>", "10.0.0.1"], type="router")])
        svg = SVGRenderer().render(graph, layout_for(graph))
        assert 'class="node-label node-label-bold"' in svg
        assert ">Core</text>" in svg
        assert ">10.0.0.1</text>" in svg
        assert 'class="node-icon"' in svg
        assert 'filter="url(#shadow)"' in svg

    def test_export_connector_node(self, layout_for):
        connector = Node(id="__export_uplink", label="Edge", shape="stadium",
                         kind=ExportConnector(pin_id="uplink"))
        graph = NetworkGraph(nodes=[connector])
        svg = SVGRenderer().render(graph, layout_for(graph))
        assert 'class="node export-connector"' in svg

    def test_interactive_attributes(self, two_node_graph, layout_for):
        graph = two_node_graph(bandwidth="10G", vlan=[100, 200])
        svg = SVGRenderer(RenderOptions(render_mode="interactive")).render(graph, layout_for(graph))
        assert 'data-device-type="router"' in svg
        assert 'data-device-json="' in svg
        assert 'data-link-from="a"' in svg
        assert 'data-link-bandwidth="10G"' in svg
        assert 'data-link-vlan="100,200"' in svg

    def test_static_mode_has_no_data_payload(self, two_node_graph, layout_for):
        graph = two_node_graph()
        svg = SVGRenderer().render(graph, layout_for(graph))
        assert "data-device-json" not in svg
        assert "data-link-json" not in svg


class TestSubgraphRendering:

    @staticmethod
    def graph_with_subgraph(file=None):
        subgraph = Subgraph(id="dc1", label="Data Center 1", file=file)
        graph = NetworkGraph(nodes=[Node(id="a", parent="dc1")], subgraphs=[subgraph])
        return graph, subgraph

    def test_drill_down_subgraph_attributes(self, layout_for):
        graph, subgraph = self.graph_with_subgraph(file="dc1.yaml")
        layout = layout_for(graph)
        layout.subgraphs["dc1"] = LayoutSubgraph(
            id="dc1", bounds=Bounds(x=20, y=20, width=300, height=200), subgraph=subgraph,
        )
        svg = SVGRenderer().render(graph, layout)

        assert 'data-has-sheet="true"' in svg
        assert 'data-sheet-id="dc1"' in svg
        assert "data-bounds=" in svg
        assert ">Data Center 1</text>" in svg

    def test_nested_sheet_id_is_prefixed(self, layout_for):
        graph, subgraph = self.graph_with_subgraph(file="dc1.yaml")
        layout = layout_for(graph)
        layout.subgraphs["dc1"] = LayoutSubgraph(
            id="dc1", bounds=Bounds(x=20, y=20, width=300, height=200), subgraph=subgraph,
        )
        svg = SVGRenderer(RenderOptions(sheet_id="site")).render(graph, layout)
        assert 'data-sheet-id="site/dc1"' in svg

    def test_plain_subgraph_has_no_sheet(self, layout_for):
        graph, subgraph = self.graph_with_subgraph()
        layout = layout_for(graph)
        layout.subgraphs["dc1"] = LayoutSubgraph(
            id="dc1", bounds=Bounds(x=20, y=20, width=300, height=200), subgraph=subgraph,
        )
        svg = SVGRenderer().render(graph, layout)
        assert 'class="subgraph" data-id="dc1"' in svg
        assert 'data-has-sheet="true"' not in svg

    def test_embedded_sheet(self, layout_for):
        graph, subgraph = self.graph_with_subgraph(file="dc1.yaml")
        layout = layout_for(graph)
        layout.subgraphs["dc1"] = LayoutSubgraph(
            id="dc1", bounds=Bounds(x=20, y=20, width=300, height=200), subgraph=subgraph,
        )
        child = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 50 40"><rect id="inner" /></svg>'
        svg = SVGRenderer(RenderOptions(embedded_sheets={"dc1": child})).render(graph, layout)
        assert '<svg class="embedded-sheet"' in svg
        assert 'viewBox="0 0 50 40"' in svg
        assert '<rect id="inner" />' in svg


# === HTML ===

class TestHTML:

    def test_single_page(self, two_node_graph, layout_for):
        graph = two_node_graph()
        graph.name = "Campus"
        html = render_html(graph, layout_for(graph))

        assert html.startswith("<!DOCTYPE html>")
        assert "<title>Campus</title>" in html
        assert '<div id="diagram"><svg' in html
        assert 'id="btn-fit"' in html
        assert 'class="branding"' not in html

    def test_toolbar_and_branding_options(self, two_node_graph, layout_for):
        graph = two_node_graph()
        html = render_html(graph, layout_for(graph), HTMLOptions(toolbar=False, branding=True))
        assert 'id="btn-fit"' not in html
        assert 'class="branding"' in html

    def test_hierarchical_page(self, two_node_graph, layout_for):
        root_graph = NetworkGraph(
            name="Campus",
            nodes=[Node(id="edge")],
            subgraphs=[Subgraph(id="dc1", label="Data Center 1", file="dc1.yaml")],
        )
        root_layout = layout_for(root_graph)
        root_layout.subgraphs["dc1"] = LayoutSubgraph(
            id="dc1", bounds=Bounds(x=20, y=20, width=300, height=200), subgraph=root_graph.subgraphs[0],
        )
        child = two_node_graph()
        nested = NetworkGraph(nodes=[Node(id="leaf")])
        sheets = {
            "root": SheetData(graph=root_graph, layout=root_layout),
            "dc1": SheetData(graph=child, layout=layout_for(child), label="Data Center 1", parent_id="root"),
            "dc1/x": SheetData(graph=nested, layout=layout_for(nested)),
        }
        html = render_hierarchical_html(sheets)

        assert html.count('class="sheet-container"') == 3
        assert 'data-sheet-id="root" data-label="Overview" style="display: block"' in html
        assert ('data-sheet-id="dc1" data-label="Data Center 1" data-parent-id="root" '
                'style="display: none"') in html
        assert 'data-sheet-id="dc1/x" data-label="dc1/x" data-parent-id="dc1"' in html
        assert 'id="btn-back"' in html
        assert 'id="breadcrumb"' in html
        assert "shumoku:navigate" in html
        assert "<title>Campus</title>" in html

    def test_hierarchical_script_uses_navigation_constants(self, two_node_graph, layout_for):
        graph = two_node_graph()
        html = render_hierarchical_html({"root": SheetData(graph=graph, layout=layout_for(graph))})
        assert "setTimeout(checkTransitions, 150)" in html
        assert "requestAnimationFrame(step)" in html
