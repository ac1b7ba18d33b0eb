"""
Tests for the layout engine.
"""

import pytest

from shumoku.services.layout import LayoutEngine
from shumoku.shared.config.settings import Settings
from shumoku.shared.models import (
    ExportConnector, Link, NetworkGraph, Node, Pin, Subgraph,
)


@pytest.fixture
def engine():
    return LayoutEngine(Settings())


def chain_graph(direction=None, **link_fields):
    return NetworkGraph(
        nodes=[Node(id="a", type="router"), Node(id="b", type="router")],
        links=[Link(**{"id": "l1", "from": "a", "to": "b", **link_fields})],
        settings={"direction": direction},
    )


def overlaps(first, second):
    ax, ay, aw, ah = first
    bx, by, bw, bh = second
    return ax < bx + bw and bx < ax + aw and ay < by + bh and by < ay + ah


def node_box(layout, node_id):
    node = layout.nodes[node_id]
    return (node.position.x - node.size.width / 2, node.position.y - node.size.height / 2,
            node.size.width, node.size.height)


class TestLayoutEngine:

    def test_top_to_bottom_layers(self, engine):
        layout = engine.layout(chain_graph())
        a, b = layout.nodes["a"], layout.nodes["b"]

        assert a.position.y < b.position.y
        assert a.position.x == b.position.x
        assert layout.metadata == {"direction": "TB", "seed": 42}

    @pytest.mark.parametrize("direction,axis,sign", [("LR", "x", 1), ("RL", "x", -1), ("BT", "y", -1)])
    def test_direction(self, engine, direction, axis, sign):
        layout = engine.layout(chain_graph(direction))
        a = getattr(layout.nodes["a"].position, axis)
        b = getattr(layout.nodes["b"].position, axis)
        assert (b - a) * sign > 0

    def test_node_size_grows_with_label(self, engine):
        long_label = "core-distribution-switch-01"
        graph = NetworkGraph(nodes=[Node(id="n", label=long_label, type="l3-switch")])
        node = engine.layout(graph).nodes["n"]
        assert node.size.width == len(long_label) * 7 + 24
        assert node.size.height == 48 + 16 + 24

    def test_export_connector_is_compact(self, engine):
        connector = Node(id="__export_p", label="Uplink", kind=ExportConnector(pin_id="p"))
        node = engine.layout(NetworkGraph(nodes=[connector])).nodes["__export_p"]
        assert node.size.height == 40

    def test_straight_route_when_aligned(self, engine):
        layout = engine.layout(chain_graph())
        a, b = layout.nodes["a"], layout.nodes["b"]
        points = [(p.x, p.y) for p in layout.links["l1"].points]

        assert points == [
            (a.position.x, a.position.y + a.size.height / 2),
            (b.position.x, b.position.y - b.size.height / 2),
        ]

    def test_orthogonal_route_when_offset(self, engine):
        graph = NetworkGraph(
            nodes=[Node(id="top"), Node(id="left"), Node(id="right")],
            links=[
                Link(**{"id": "l1", "from": "top", "to": "left"}),
                Link(**{"id": "l2", "from": "top", "to": "right"}),
            ],
        )
        layout = engine.layout(graph)
        route = layout.links["l1"].points
        assert len(route) == 4
        # every segment is horizontal or vertical
        for start, end in zip(route, route[1:]):
            assert start.x == pytest.approx(end.x) or start.y == pytest.approx(end.y)

    def test_straight_edge_style(self, engine):
        graph = NetworkGraph(
            nodes=[Node(id="top"), Node(id="left"), Node(id="right")],
            links=[
                Link(**{"id": "l1", "from": "top", "to": "left"}),
                Link(**{"id": "l2", "from": "top", "to": "right"}),
            ],
            settings={"edgeStyle": "straight"},
        )
        assert len(engine.layout(graph).links["l1"].points) == 2

    def test_named_port_becomes_port_box(self, engine):
        graph = NetworkGraph(
            nodes=[Node(id="a"), Node(id="b")],
            links=[Link(**{"id": "l1", "from": {"node": "a", "port": "eth0"}, "to": "b"})],
        )
        layout = engine.layout(graph)
        port = layout.nodes["a"].ports["eth0"]
        assert port.side == "bottom"
        assert port.label == "eth0"
        assert port.position.y == layout.nodes["a"].size.height / 2

    def test_ports_on_one_side_are_spread(self, engine):
        graph = NetworkGraph(
            nodes=[Node(id="sw"), Node(id="x"), Node(id="y")],
            links=[
                Link(**{"id": "l1", "from": {"node": "sw", "port": "p1"}, "to": "x"}),
                Link(**{"id": "l2", "from": {"node": "sw", "port": "p2"}, "to": "y"}),
            ],
        )
        layout = engine.layout(graph)
        ports = layout.nodes["sw"].ports
        assert ports["p1"].side == ports["p2"].side == "bottom"
        assert ports["p1"].position.x != ports["p2"].position.x

        # the link starts at its (moved) port
        sw = layout.nodes["sw"]
        start = layout.links["l1"].points[0]
        assert start.x == pytest.approx(sw.position.x + ports["p1"].position.x)

    def test_subgraph_contains_members(self, engine):
        graph = NetworkGraph(
            nodes=[Node(id="a", parent="dc1"), Node(id="b", parent="dc1"), Node(id="c")],
            subgraphs=[Subgraph(id="dc1")],
            links=[Link(**{"id": "l1", "from": "a", "to": "b"}), Link(**{"id": "l2", "from": "b", "to": "c"})],
        )
        layout = engine.layout(graph)
        bounds = layout.subgraphs["dc1"].bounds

        for node_id in ("a", "b"):
            x, y, w, h = node_box(layout, node_id)
            assert bounds.x <= x and x + w <= bounds.x + bounds.width
            assert bounds.y <= y and y + h <= bounds.y + bounds.height
        assert not overlaps(node_box(layout, "c"), (bounds.x, bounds.y, bounds.width, bounds.height))

    def test_nested_subgraphs(self, engine):
        graph = NetworkGraph(
            nodes=[Node(id="srv", parent="rack")],
            subgraphs=[Subgraph(id="dc1"), Subgraph(id="rack", parent="dc1")],
        )
        layout = engine.layout(graph)
        outer = layout.subgraphs["dc1"].bounds
        inner = layout.subgraphs["rack"].bounds
        assert outer.x < inner.x and inner.x + inner.width < outer.x + outer.width
        assert outer.y < inner.y and inner.y + inner.height < outer.y + outer.height

    def test_empty_subgraph_has_size(self, engine):
        graph = NetworkGraph(subgraphs=[Subgraph(id="empty")])
        bounds = engine.layout(graph).subgraphs["empty"].bounds
        assert bounds.width > 0 and bounds.height > 0

    def test_pin_position_picks_port_side(self, engine):
        graph = NetworkGraph(
            nodes=[Node(id="edge"), Node(id="inside", parent="dc1")],
            subgraphs=[Subgraph(id="dc1", pins=[Pin(id="uplink", position="left")])],
            links=[Link(**{"id": "l1", "from": {"node": "dc1", "port": "uplink"}, "to": "edge"})],
        )
        layout = engine.layout(graph)
        assert layout.subgraphs["dc1"].ports["uplink"].side == "left"

    def test_cycle_is_laid_out_without_overlap(self, engine):
        graph = NetworkGraph(
            nodes=[Node(id=n) for n in "abcd"],
            links=[
                Link(**{"id": "l1", "from": "a", "to": "b"}),
                Link(**{"id": "l2", "from": "b", "to": "c"}),
                Link(**{"id": "l3", "from": "c", "to": "d"}),
                Link(**{"id": "l4", "from": "d", "to": "a"}),
            ],
        )
        layout = engine.layout(graph)
        boxes = [node_box(layout, n) for n in "abcd"]
        for i, first in enumerate(boxes):
            for second in boxes[i + 1:]:
                assert not overlaps(first, second)

    def test_layout_is_deterministic(self, engine):
        graph = NetworkGraph(
            nodes=[Node(id=n) for n in "abcde"],
            links=[Link(**{"from": "a", "to": "b"}), Link(**{"from": "b", "to": "c"}),
                   Link(**{"from": "c", "to": "a"}), Link(**{"from": "d", "to": "e"})],
        )
        assert engine.layout(graph).model_dump() == engine.layout(graph).model_dump()

    def test_link_without_id_gets_positional_id(self, engine):
        graph = NetworkGraph(nodes=[Node(id="a"), Node(id="b")], links=[Link(**{"from": "a", "to": "b"})])
        assert list(engine.layout(graph).links) == ["link-0"]

    def test_unknown_endpoint_is_skipped(self, engine):
        graph = NetworkGraph(nodes=[Node(id="a")], links=[Link(**{"id": "l1", "from": "a", "to": "ghost"})])
        layout = engine.layout(graph)
        assert layout.links == {}
        assert "a" in layout.nodes

    def test_bounds_include_margin(self, engine):
        layout = engine.layout(chain_graph())
        a = layout.nodes["a"]
        assert layout.bounds.x == a.position.x - a.size.width / 2 - 40
        assert layout.bounds.y == a.position.y - a.size.height / 2 - 40

    def test_empty_graph(self, engine):
        layout = engine.layout(NetworkGraph())
        assert (layout.bounds.width, layout.bounds.height) == (800, 600)

    def test_document_spacing_overrides_settings(self, engine):
        tight = engine.layout(chain_graph())
        graph = chain_graph()
        graph.settings.rank_spacing = 200
        loose = engine.layout(graph)
        gap = lambda layout: layout.nodes["b"].position.y - layout.nodes["a"].position.y  # noqa: E731
        assert gap(loose) - gap(tight) == pytest.approx(120)
