"""
Shared fixtures for the Shumoku test suite.
"""

import sys
from pathlib import Path

import pytest

# Add src to path so tests run without installing the package
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from shumoku.services.hierarchy import HierarchicalParser, MemoryFileResolver  # noqa: E402
from shumoku.services.navigation import ManualScheduler  # noqa: E402
from shumoku.shared.infrastructure.monitoring import get_metrics  # noqa: E402
from shumoku.shared.models import (  # noqa: E402
    Bounds, LayoutLink, LayoutNode, LayoutResult, Link, NetworkGraph, Node,
    Position, Size,
)


MAIN_YAML = """
name: campus
nodes:
  - id: edge-rtr
    label: Edge Router
    type: router
subgraphs:
  - id: dc1
    label: Data Center 1
    file: ./dc1.yaml
    pins:
      - id: uplink
links:
  - from: {node: dc1, pin: uplink}
    to: edge-rtr
    bandwidth: 10G
"""

DC1_YAML = """
name: dc1
nodes:
  - id: core-sw
    type: l3-switch
  - id: r1
    type: router
  - id: srv1
    type: server
    parent: rack1
subgraphs:
  - id: rack1
    label: Rack 1
pins:
  - id: uplink
    device: core-sw
    port: eth0
links:
  - from: core-sw
    to: r1
  - from: r1
    to: srv1
"""


@pytest.fixture(autouse=True)
def reset_metrics():
    """Start every test with an empty metrics collector."""
    get_metrics().reset()
    yield


@pytest.fixture
def campus_files():
    return {"/topology/main.yaml": MAIN_YAML, "/topology/dc1.yaml": DC1_YAML}


@pytest.fixture
def memory_resolver(campus_files):
    return MemoryFileResolver(campus_files)


@pytest.fixture
def hierarchical_parser(memory_resolver):
    return HierarchicalParser(memory_resolver)


@pytest.fixture
def scheduler():
    return ManualScheduler()


def make_layout(graph: NetworkGraph, points=None, bounds=None) -> LayoutResult:
    """Hand-built layout: nodes in a row, each link routed between centers."""
    nodes = {}
    for index, node in enumerate(graph.nodes):
        nodes[node.id] = LayoutNode(
            id=node.id,
            position=Position(x=100 + index * 200, y=100),
            size=Size(width=140, height=80),
            node=node,
        )

    links = {}
    for index, link in enumerate(graph.links):
        link_id = link.id or f"link-{index}"
        source = nodes[link.from_ if isinstance(link.from_, str) else link.from_.node]
        target = nodes[link.to if isinstance(link.to, str) else link.to.node]
        route = points or [(source.position.x, source.position.y + 40), (target.position.x, target.position.y + 40)]
        links[link_id] = LayoutLink(
            id=link_id,
            from_=source.id,
            to=target.id,
            from_endpoint=link.from_,
            to_endpoint=link.to,
            points=[Position(x=x, y=y) for x, y in route],
            link=link,
        )

    return LayoutResult(
        nodes=nodes,
        links=links,
        bounds=bounds if bounds is not None else Bounds(x=0, y=0, width=600, height=300),
    )


@pytest.fixture
def two_node_graph():
    def build(**link_fields):
        return NetworkGraph(
            nodes=[Node(id="a", type="router"), Node(id="b", type="l2-switch")],
            links=[Link(**{"id": "l1", "from": "a", "to": "b", **link_fields})],
        )
    return build


@pytest.fixture
def layout_for():
    return make_layout
