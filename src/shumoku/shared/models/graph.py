"""
Network graph data models for Shumoku.

These models represent a network topology document and are used across:
- hierarchy: builds and merges graphs from one or more documents
- layout: assigns coordinates to nodes, links and subgraphs
- rendering: turns a graph plus its layout into SVG/HTML
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import Field, field_validator, model_validator

from .base import BaseModel, MetadataMixin


EXPORT_NODE_PREFIX = "__export_"
EXPORT_LINK_PREFIX = "__export_link_"
ROOT_SHEET_ID = "root"


class NodeShape(str, Enum):
    RECT = "rect"
    ROUNDED = "rounded"
    CIRCLE = "circle"
    DIAMOND = "diamond"
    HEXAGON = "hexagon"
    CYLINDER = "cylinder"
    STADIUM = "stadium"
    TRAPEZOID = "trapezoid"


class DeviceType(str, Enum):
    ROUTER = "router"
    L3_SWITCH = "l3-switch"
    L2_SWITCH = "l2-switch"
    FIREWALL = "firewall"
    LOAD_BALANCER = "load-balancer"
    SERVER = "server"
    ACCESS_POINT = "access-point"
    CLOUD = "cloud"
    INTERNET = "internet"
    VPN = "vpn"
    DATABASE = "database"
    GENERIC = "generic"


class LinkType(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"
    THICK = "thick"
    DOUBLE = "double"
    INVISIBLE = "invisible"


class ArrowType(str, Enum):
    NONE = "none"
    FORWARD = "forward"
    BACK = "back"
    BOTH = "both"


class Bandwidth(str, Enum):
    G1 = "1G"
    G10 = "10G"
    G25 = "25G"
    G40 = "40G"
    G100 = "100G"


class Redundancy(str, Enum):
    HA = "ha"
    VC = "vc"
    VSS = "vss"
    VPC = "vpc"
    MLAG = "mlag"
    STACK = "stack"


class EdgeStyle(str, Enum):
    POLYLINE = "polyline"
    ORTHOGONAL = "orthogonal"
    SPLINES = "splines"
    STRAIGHT = "straight"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class Direction(str, Enum):
    TB = "TB"
    BT = "BT"
    LR = "LR"
    RL = "RL"


class PinDirection(str, Enum):
    IN = "in"
    OUT = "out"
    BIDIRECTIONAL = "bidirectional"


class LegendPosition(str, Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"


# Document spellings accepted for each enumeration
SHAPE_ALIASES = {
    "rect": "rect", "rectangle": "rect",
    "rounded": "rounded", "round": "rounded",
    "circle": "circle",
    "diamond": "diamond", "rhombus": "diamond",
    "hexagon": "hexagon",
    "cylinder": "cylinder", "database": "cylinder",
    "stadium": "stadium", "pill": "stadium",
    "trapezoid": "trapezoid",
}

DEVICE_TYPE_ALIASES = {
    "router": "router",
    "l3-switch": "l3-switch",
    "l2-switch": "l2-switch", "switch": "l2-switch",
    "firewall": "firewall",
    "load-balancer": "load-balancer", "lb": "load-balancer",
    "server": "server",
    "access-point": "access-point", "ap": "access-point",
    "cloud": "cloud",
    "internet": "internet",
    "vpn": "vpn",
    "database": "database", "db": "database",
    "generic": "generic",
}

LINK_TYPE_ALIASES = {
    "solid": "solid",
    "dashed": "dashed", "dotted": "dashed",
    "thick": "thick",
    "double": "double",
    "invisible": "invisible", "hidden": "invisible",
}

ARROW_ALIASES = {
    "none": "none",
    "forward": "forward", "->": "forward",
    "back": "back", "<-": "back",
    "both": "both", "<->": "both",
}

REDUNDANCY_ALIASES = {
    "ha": "ha", "vrrp": "ha", "hsrp": "ha", "glbp": "ha", "keepalive": "ha",
    "vc": "vc", "virtual-chassis": "vc",
    "vss": "vss",
    "vpc": "vpc",
    "mlag": "mlag", "mclag": "mlag",
    "stack": "stack", "stacking": "stack", "irf": "stack",
}

DIRECTION_ALIASES = {
    "tb": "TB", "top-bottom": "TB",
    "bt": "BT", "bottom-top": "BT",
    "lr": "LR", "left-right": "LR",
    "rl": "RL", "right-left": "RL",
}

BANDWIDTH_ORDER = ["1G", "10G", "25G", "40G", "100G"]


def normalize_bandwidth(value: Any) -> Optional[str]:
    """Map spellings such as ``10GbE`` or ``100 gbit`` onto a Bandwidth value."""
    if value is None or value == "":
        return None
    text = str(value).upper().replace(" ", "")
    for suffix in ("GBIT", "GBE"):
        if text.endswith(suffix):
            text = text[: -len(suffix)] + "G"
            break
    return text if text in BANDWIDTH_ORDER else None


def _lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


class NodeStyle(BaseModel):
    """Per-node visual overrides."""

    fill: Optional[str] = None
    stroke: Optional[str] = None
    stroke_width: Optional[float] = Field(default=None, alias="strokeWidth")
    stroke_dasharray: Optional[str] = Field(default=None, alias="strokeDasharray")
    text_color: Optional[str] = Field(default=None, alias="textColor")
    font_size: Optional[float] = Field(default=None, alias="fontSize")
    font_weight: Optional[str] = Field(default=None, alias="fontWeight")
    opacity: Optional[float] = None


class LinkStyle(BaseModel):
    """Per-link visual overrides."""

    stroke: Optional[str] = None
    stroke_width: Optional[float] = Field(default=None, alias="strokeWidth")
    stroke_dasharray: Optional[str] = Field(default=None, alias="strokeDasharray")
    opacity: Optional[float] = None
    min_length: Optional[float] = Field(default=None, alias="minLength")


class SubgraphStyle(BaseModel):
    """Per-subgraph visual overrides."""

    fill: Optional[str] = None
    stroke: Optional[str] = None
    stroke_width: Optional[float] = Field(default=None, alias="strokeWidth")
    stroke_dasharray: Optional[str] = Field(default=None, alias="strokeDasharray")
    label_position: Optional[str] = Field(default=None, alias="labelPosition")
    label_font_size: Optional[float] = Field(default=None, alias="labelFontSize")
    padding: Optional[float] = None


class NodePort(BaseModel):
    """A named physical port declared on a node."""

    label: Optional[str] = None
    ip: Optional[str] = None
    description: Optional[str] = None


class DeviceKind(BaseModel):
    """Marks an ordinary device node."""

    kind: Literal["device"] = "device"


class ExportConnector(BaseModel):
    """
    Marks a synthetic boundary-connector node.

    Export connectors live only inside a child sheet and stand for the
    connection that leaves the sheet through one of its pins.
    """

    kind: Literal["export"] = "export"
    pin_id: str = Field(..., description="Pin this connector represents")
    direction: PinDirection = Field(default=PinDirection.BIDIRECTIONAL)
    local_device: Optional[str] = Field(default=None, description="Device inside the sheet")
    local_port: Optional[str] = Field(default=None, description="Port on the local device")
    dest_subgraph: Optional[str] = None
    dest_subgraph_label: Optional[str] = None
    dest_device: Optional[str] = None
    dest_port: Optional[str] = None
    dest_pin: Optional[str] = None
    is_source: Optional[bool] = None


NodeKind = Annotated[Union[DeviceKind, ExportConnector], Field(discriminator="kind")]


class Node(BaseModel, MetadataMixin):
    """
    A device (or synthetic connector) in a network graph.

    ``label`` may hold several lines; the first is the primary one.
    """

    id: str = Field(..., description="Unique identifier within its graph")
    label: Union[str, List[str]] = Field(default="", description="One or more label lines")
    shape: NodeShape = Field(default=NodeShape.ROUNDED, description="Node outline shape")
    type: Optional[DeviceType] = Field(default=None, description="Device type")
    parent: Optional[str] = Field(default=None, description="Containing subgraph id")
    rank: Optional[Union[int, str]] = None
    style: Optional[NodeStyle] = None
    vendor: Optional[str] = None
    service: Optional[str] = None
    model: Optional[str] = None
    resource: Optional[str] = None
    icon: Optional[str] = None
    ports: Dict[str, NodePort] = Field(default_factory=dict, description="Declared ports by name")
    kind: NodeKind = Field(default_factory=DeviceKind, description="Device or export connector")

    @model_validator(mode='before')
    @classmethod
    def default_label(cls, data):
        """Fall back to the node id when no label is given."""
        if isinstance(data, dict) and not data.get("label") and data.get("id"):
            data = dict(data)
            data["label"] = data["id"]
        return data

    @field_validator('shape', mode='before')
    @classmethod
    def normalize_shape(cls, v):
        if isinstance(v, NodeShape):
            return v
        return SHAPE_ALIASES.get(str(v or "").lower(), "rounded")

    @field_validator('type', mode='before')
    @classmethod
    def normalize_type(cls, v):
        if v is None or v == "" or isinstance(v, DeviceType):
            return v or None
        return DEVICE_TYPE_ALIASES.get(str(v).lower(), "generic")

    @field_validator('vendor', 'service', 'model', 'resource', mode='before')
    @classmethod
    def lowercase_icon_keys(cls, v):
        return _lower(v)

    @field_validator('ports', mode='before')
    @classmethod
    def normalize_ports(cls, v):
        if v is None:
            return {}
        if isinstance(v, list):
            return {str(name): {} for name in v}
        return v

    @property
    def label_lines(self) -> List[str]:
        """Label split into display lines."""
        if isinstance(self.label, list):
            return [str(line) for line in self.label]
        return str(self.label).split("\n") if self.label else [self.id]

    @property
    def is_export(self) -> bool:
        """Whether this node is a synthetic export connector."""
        return isinstance(self.kind, ExportConnector)


class LinkEndpoint(BaseModel):
    """
    One end of a link.

    ``pin`` is only meaningful before hierarchical resolution, where
    ``node`` names a subgraph and ``pin`` one of its pins.
    """

    node: str
    port: Optional[str] = None
    ip: Optional[str] = None
    pin: Optional[str] = None


Endpoint = Union[str, LinkEndpoint]


def endpoint_node(endpoint: Endpoint) -> str:
    """Node (or subgraph) id an endpoint refers to."""
    return endpoint if isinstance(endpoint, str) else endpoint.node


def endpoint_port(endpoint: Endpoint) -> Optional[str]:
    """Port name of an endpoint, if any."""
    return None if isinstance(endpoint, str) else endpoint.port


def endpoint_ip(endpoint: Endpoint) -> Optional[str]:
    return None if isinstance(endpoint, str) else endpoint.ip


def is_pin_reference(endpoint: Endpoint) -> bool:
    """Whether an endpoint still refers to a subgraph pin."""
    return isinstance(endpoint, LinkEndpoint) and endpoint.pin is not None


class ExportLinkInfo(BaseModel):
    """Destination details carried by a synthetic export-connector link."""

    pin_id: str
    dest_subgraph_label: Optional[str] = None
    dest_device: Optional[str] = None
    dest_port: Optional[str] = None


class Link(BaseModel, MetadataMixin):
    """A connection between two endpoints."""

    id: Optional[str] = Field(default=None, description="Link id, required once merged")
    from_: Endpoint = Field(..., alias="from", description="Source endpoint")
    to: Endpoint = Field(..., description="Target endpoint")
    label: Optional[Union[str, List[str]]] = None
    type: Optional[LinkType] = Field(default=None, description="Defaults by redundancy when unset")
    arrow: Optional[ArrowType] = None
    bandwidth: Optional[Bandwidth] = None
    redundancy: Optional[Redundancy] = None
    vlan: Optional[List[int]] = None
    style: Optional[LinkStyle] = None
    export: Optional[ExportLinkInfo] = Field(default=None, description="Set on export-connector links")

    @field_validator('type', mode='before')
    @classmethod
    def normalize_type(cls, v):
        if v is None or v == "" or isinstance(v, LinkType):
            return v or None
        return LINK_TYPE_ALIASES.get(str(v).lower(), "solid")

    @field_validator('arrow', mode='before')
    @classmethod
    def normalize_arrow(cls, v):
        if v is None or v == "" or isinstance(v, ArrowType):
            return v or None
        return ARROW_ALIASES.get(str(v).lower(), "forward")

    @field_validator('bandwidth', mode='before')
    @classmethod
    def normalize_bandwidth(cls, v):
        if isinstance(v, Bandwidth):
            return v
        return normalize_bandwidth(v)

    @field_validator('redundancy', mode='before')
    @classmethod
    def normalize_redundancy(cls, v):
        if v is None or isinstance(v, Redundancy):
            return v
        return REDUNDANCY_ALIASES.get(str(v).lower())

    @field_validator('vlan', mode='before')
    @classmethod
    def normalize_vlan(cls, v):
        if v is None:
            return None
        return v if isinstance(v, (list, tuple)) else [v]

    @property
    def is_export(self) -> bool:
        return self.export is not None


class Pin(BaseModel):
    """A subgraph's declared external connection point."""

    id: str
    label: Optional[str] = None
    device: Optional[str] = Field(default=None, description="Device the pin resolves to")
    port: Optional[str] = Field(default=None, description="Port on the resolved device")
    direction: Optional[PinDirection] = None
    position: Optional[str] = Field(default=None, description="top, bottom, left or right")

    @field_validator('direction', mode='before')
    @classmethod
    def normalize_direction(cls, v):
        if v is None or isinstance(v, PinDirection):
            return v
        text = str(v).lower()
        return text if text in ("in", "out") else "bidirectional"


class Subgraph(BaseModel):
    """
    A named grouping of nodes.

    A subgraph with ``file`` is a drill-down sheet boundary whose contents
    come from the referenced child document.
    """

    id: str
    label: str = ""
    children: List[str] = Field(default_factory=list)
    parent: Optional[str] = None
    direction: Optional[Direction] = None
    style: Optional[SubgraphStyle] = None
    vendor: Optional[str] = None
    service: Optional[str] = None
    model: Optional[str] = None
    resource: Optional[str] = None
    icon: Optional[str] = None
    file: Optional[str] = Field(default=None, description="Child document path")
    pins: Optional[List[Pin]] = Field(default=None, description="Declared boundary pins")

    @model_validator(mode='before')
    @classmethod
    def default_label(cls, data):
        if isinstance(data, dict) and not data.get("label") and data.get("id"):
            data = dict(data)
            data["label"] = data["id"]
        return data

    @field_validator('direction', mode='before')
    @classmethod
    def normalize_direction(cls, v):
        if v is None or isinstance(v, Direction):
            return v
        return DIRECTION_ALIASES.get(str(v).lower())

    @field_validator('vendor', 'service', 'model', 'resource', mode='before')
    @classmethod
    def lowercase_icon_keys(cls, v):
        return _lower(v)

    def get_pin(self, pin_id: str) -> Optional[Pin]:
        for pin in self.pins or []:
            if pin.id == pin_id:
                return pin
        return None


class LegendSettings(BaseModel):
    """Legend visibility and placement."""

    enabled: bool = True
    position: LegendPosition = LegendPosition.TOP_RIGHT
    show_device_types: bool = Field(default=True, alias="showDeviceTypes")
    show_bandwidth: bool = Field(default=True, alias="showBandwidth")
    show_cable_types: bool = Field(default=True, alias="showCableTypes")
    show_vlans: bool = Field(default=False, alias="showVlans")


class GraphSettings(BaseModel):
    """Document-wide rendering and layout hints."""

    direction: Optional[Direction] = None
    theme: Optional[Theme] = None
    edge_style: Optional[EdgeStyle] = Field(default=None, alias="edgeStyle")
    node_spacing: Optional[float] = Field(default=None, alias="nodeSpacing")
    rank_spacing: Optional[float] = Field(default=None, alias="rankSpacing")
    subgraph_padding: Optional[float] = Field(default=None, alias="subgraphPadding")
    legend: Optional[Union[bool, LegendSettings]] = None

    @field_validator('direction', mode='before')
    @classmethod
    def normalize_direction(cls, v):
        if v is None or isinstance(v, Direction):
            return v
        return DIRECTION_ALIASES.get(str(v).lower())

    @field_validator('theme', mode='before')
    @classmethod
    def normalize_theme(cls, v):
        if v is None or isinstance(v, Theme):
            return v
        return "dark" if str(v).lower() == "dark" else "light"

    @field_validator('edge_style', mode='before')
    @classmethod
    def normalize_edge_style(cls, v):
        if v is None or isinstance(v, EdgeStyle):
            return v
        text = str(v).lower()
        return text if text in {e.value for e in EdgeStyle} else None

    def legend_settings(self) -> LegendSettings:
        """Resolve the ``legend`` shorthand into full settings."""
        if self.legend is True:
            return LegendSettings()
        if isinstance(self.legend, LegendSettings):
            return self.legend
        return LegendSettings(enabled=False)


class NetworkGraph(BaseModel):
    """
    A network topology: nodes, links, subgraphs and settings.

    ``pins`` is the boundary contract of this graph when it is used as a
    child document.
    """

    version: str = Field(default="1.0.0")
    name: Optional[str] = None
    description: Optional[str] = None
    nodes: List[Node] = Field(default_factory=list)
    links: List[Link] = Field(default_factory=list)
    subgraphs: List[Subgraph] = Field(default_factory=list)
    settings: GraphSettings = Field(default_factory=GraphSettings)
    pins: Optional[List[Pin]] = None

    @field_validator('nodes', 'links', 'subgraphs', mode='before')
    @classmethod
    def none_to_list(cls, v):
        return [] if v is None else v

    @field_validator('settings', mode='before')
    @classmethod
    def none_to_settings(cls, v):
        return {} if v is None else v

    def get_node(self, node_id: str) -> Optional[Node]:
        """Look up a node by id."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_subgraph(self, subgraph_id: str) -> Optional[Subgraph]:
        """Look up a subgraph by id."""
        for subgraph in self.subgraphs:
            if subgraph.id == subgraph_id:
                return subgraph
        return None

    def get_statistics(self) -> Dict[str, int]:
        """Count graph elements."""
        return {
            'nodes': len(self.nodes),
            'links': len(self.links),
            'subgraphs': len(self.subgraphs),
            'pins': len(self.pins or []),
        }


class HierarchicalNetworkGraph(NetworkGraph):
    """A merged graph together with the standalone view of every sheet."""

    sheets: Dict[str, NetworkGraph] = Field(default_factory=dict)
    parent_sheet: Optional[str] = Field(default=None, alias="parentSheet")
    breadcrumb: List[str] = Field(default_factory=lambda: [ROOT_SHEET_ID])
