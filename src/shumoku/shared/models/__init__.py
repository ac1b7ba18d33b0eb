"""
Shared data models for Shumoku.
"""

from .base import BaseModel, MetadataMixin
from .graph import (
    ArrowType, Bandwidth, DeviceKind, DeviceType, Direction, EdgeStyle,
    ExportConnector, ExportLinkInfo, GraphSettings, HierarchicalNetworkGraph,
    LegendPosition, LegendSettings, Link, LinkEndpoint, LinkStyle, LinkType,
    NetworkGraph, Node, NodePort, NodeShape, NodeStyle, Pin, PinDirection,
    Redundancy, Subgraph, SubgraphStyle, Theme,
    BANDWIDTH_ORDER, EXPORT_LINK_PREFIX, EXPORT_NODE_PREFIX, ROOT_SHEET_ID,
    endpoint_ip, endpoint_node, endpoint_port, is_pin_reference,
)
from .layout import (
    Bounds, LayoutLink, LayoutNode, LayoutPort, LayoutResult, LayoutSubgraph,
    Position, Size,
)

__all__ = [
    # Base models
    "BaseModel", "MetadataMixin",
    # Graph models
    "ArrowType", "Bandwidth", "DeviceKind", "DeviceType", "Direction", "EdgeStyle",
    "ExportConnector", "ExportLinkInfo", "GraphSettings", "HierarchicalNetworkGraph",
    "LegendPosition", "LegendSettings", "Link", "LinkEndpoint", "LinkStyle", "LinkType",
    "NetworkGraph", "Node", "NodePort", "NodeShape", "NodeStyle", "Pin", "PinDirection",
    "Redundancy", "Subgraph", "SubgraphStyle", "Theme",
    "BANDWIDTH_ORDER", "EXPORT_LINK_PREFIX", "EXPORT_NODE_PREFIX", "ROOT_SHEET_ID",
    "endpoint_ip", "endpoint_node", "endpoint_port", "is_pin_reference",
    # Layout models
    "Bounds", "LayoutLink", "LayoutNode", "LayoutPort", "LayoutResult", "LayoutSubgraph",
    "Position", "Size",
]
