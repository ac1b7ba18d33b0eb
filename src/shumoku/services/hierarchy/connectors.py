"""
Export connectors and pin resolution.

Export connectors are synthetic node/link pairs placed inside a child
sheet for every pin that resolves to a device, so the sheet shows where
its traffic leaves. Pin references (``{node: <subgraph>, pin: <pin>}``)
are rewritten to concrete device endpoints once every child document has
been merged.
"""

from typing import Dict, Optional, Tuple

from ...shared.models import (
    EXPORT_LINK_PREFIX, EXPORT_NODE_PREFIX, ArrowType, ExportConnector,
    ExportLinkInfo, Link, LinkEndpoint, LinkType, NetworkGraph, Node,
    NodeShape, Pin, PinDirection, endpoint_node, endpoint_port,
    is_pin_reference,
)


PinKey = Tuple[str, str]


def is_export_node_id(node_id: str) -> bool:
    return node_id.startswith(EXPORT_NODE_PREFIX)


def is_export_link_id(link_id: Optional[str]) -> bool:
    return bool(link_id) and link_id.startswith(EXPORT_LINK_PREFIX)


def generate_export_connectors(graph: NetworkGraph) -> None:
    """
    Add an export connector for every graph-level pin that names a device.

    Pins with direction ``in`` link connector -> device; all other pins
    link device -> connector.
    """
    for pin in graph.pins or []:
        if not pin.device:
            continue

        direction = pin.direction or PinDirection.BIDIRECTIONAL
        connector = Node(
            id=f"{EXPORT_NODE_PREFIX}{pin.id}",
            label=pin.label or pin.id,
            shape=NodeShape.STADIUM,
            kind=ExportConnector(
                pin_id=pin.id,
                direction=direction,
                local_device=pin.device,
                local_port=pin.port,
            ),
        )
        device_end = LinkEndpoint(node=pin.device, port=pin.port) if pin.port else pin.device

        if direction == PinDirection.IN:
            ends = {"from": connector.id, "to": device_end}
        else:
            ends = {"from": device_end, "to": connector.id}

        graph.nodes.append(connector)
        graph.links.append(Link(
            id=f"{EXPORT_LINK_PREFIX}{pin.id}",
            type=LinkType.DASHED,
            arrow=ArrowType.FORWARD,
            export=ExportLinkInfo(pin_id=pin.id),
            **ends,
        ))


def build_pin_map(graph: NetworkGraph) -> Dict[PinKey, Pin]:
    """Index every subgraph pin by ``(subgraph_id, pin_id)``."""
    pin_map: Dict[PinKey, Pin] = {}
    for subgraph in graph.subgraphs:
        for pin in subgraph.pins or []:
            pin_map[(subgraph.id, pin.id)] = pin
    return pin_map


def annotate_export_connectors(graph: NetworkGraph, sheets: Dict[str, NetworkGraph]) -> int:
    """
    Record on each child sheet's export connectors where their pin leads.

    Must run before ``resolve_pin_references`` since it reads the pin
    references that step rewrites.

    Returns:
        Number of connectors annotated
    """
    pin_map = build_pin_map(graph)
    annotated = 0

    for link in graph.links:
        for local, remote, is_source in ((link.from_, link.to, True), (link.to, link.from_, False)):
            if not is_pin_reference(local):
                continue
            sheet = sheets.get(local.node)
            if sheet is None:
                continue
            destination = _describe_destination(graph, pin_map, remote)
            if _apply_destination(sheet, local.pin, destination, is_source):
                annotated += 1

    return annotated


def _describe_destination(graph: NetworkGraph, pin_map: Dict[PinKey, Pin], remote) -> Dict[str, Optional[str]]:
    if is_pin_reference(remote):
        subgraph = graph.get_subgraph(remote.node)
        pin = pin_map.get((remote.node, remote.pin))
        return {
            "dest_subgraph": remote.node,
            "dest_subgraph_label": subgraph.label if subgraph else remote.node,
            "dest_pin": remote.pin,
            "dest_device": pin.device if pin and pin.device else remote.node,
            "dest_port": pin.port if pin else None,
        }

    node_id = endpoint_node(remote)
    node = graph.get_node(node_id)
    container = graph.get_subgraph(node.parent) if node and node.parent else None
    if container is not None:
        label = container.label
    else:
        label = node.label_lines[0] if node else node_id

    return {
        "dest_subgraph": container.id if container else None,
        "dest_subgraph_label": label,
        "dest_pin": None,
        "dest_device": node_id,
        "dest_port": endpoint_port(remote),
    }


def _apply_destination(sheet: NetworkGraph, pin_id: str, destination: Dict[str, Optional[str]], is_source: bool) -> bool:
    connector = sheet.get_node(f"{EXPORT_NODE_PREFIX}{pin_id}")
    if connector is None or not connector.is_export:
        return False

    connector.kind = connector.kind.model_copy(update={**destination, "is_source": is_source})
    if destination["dest_subgraph_label"]:
        connector.label = destination["dest_subgraph_label"]

    link_id = f"{EXPORT_LINK_PREFIX}{pin_id}"
    for link in sheet.links:
        if link.id == link_id and link.export is not None:
            link.export = link.export.model_copy(update={
                "dest_subgraph_label": destination["dest_subgraph_label"],
                "dest_device": destination["dest_device"],
                "dest_port": destination["dest_port"],
            })
    return True


def resolve_pin_references(graph: NetworkGraph) -> int:
    """
    Rewrite ``{node: subgraph, pin: pin}`` endpoints to ``{node: device, port}``.

    References to pins that never resolved to a device are left unchanged.

    Returns:
        Number of endpoints rewritten
    """
    pin_map = build_pin_map(graph)
    rewritten = 0

    for link in graph.links:
        for attr in ("from_", "to"):
            endpoint = getattr(link, attr)
            if not is_pin_reference(endpoint):
                continue
            pin = pin_map.get((endpoint.node, endpoint.pin))
            if pin is None or not pin.device:
                continue
            setattr(link, attr, LinkEndpoint(node=pin.device, port=pin.port, ip=endpoint.ip))
            rewritten += 1

    return rewritten


def pins_to_boundary_ports(graph: NetworkGraph) -> None:
    """
    Turn pin references into subgraph-boundary endpoints.

    Used for a sheet's standalone view, where the subgraph box itself is
    the endpoint and the pin becomes a port on its edge.
    """
    for link in graph.links:
        for attr in ("from_", "to"):
            endpoint = getattr(link, attr)
            if is_pin_reference(endpoint):
                setattr(link, attr, LinkEndpoint(node=endpoint.node, port=endpoint.pin, ip=endpoint.ip))
