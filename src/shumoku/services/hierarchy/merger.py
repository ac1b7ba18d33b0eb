"""
Merging of child documents into the subgraph they fill.
"""

from typing import Dict

from ...shared.models import NetworkGraph, Subgraph
from ...shared.infrastructure.monitoring import get_logger
from .connectors import is_export_link_id


class GraphMerger:
    """
    Merges a parsed child graph into its parent.

    Child node ids are kept as-is; containment is namespaced instead by
    rewriting ``parent`` pointers under the filled subgraph's id. Child
    subgraph and link ids are prefixed with ``<subgraph_id>/``.
    Export connectors never leave the child sheet.
    """

    def __init__(self):
        self.logger = get_logger(__name__)

    def merge(self, parent: NetworkGraph, child: NetworkGraph, subgraph: Subgraph) -> None:
        """
        Merge ``child`` into ``parent`` as the contents of ``subgraph``.

        Args:
            parent: Graph being built; mutated in place
            child: Fully resolved child graph; left untouched
            subgraph: Subgraph of ``parent`` whose ``file`` produced ``child``
        """
        prefix = subgraph.id

        merged_nodes = 0
        for node in child.nodes:
            if node.is_export:
                continue
            copy = node.model_copy(deep=True)
            copy.parent = self._namespaced(prefix, node.parent)
            parent.nodes.append(copy)
            merged_nodes += 1

        for child_subgraph in child.subgraphs:
            copy = child_subgraph.model_copy(deep=True)
            copy.id = f"{prefix}/{child_subgraph.id}"
            copy.parent = self._namespaced(prefix, child_subgraph.parent)
            copy.children = [f"{prefix}/{c}" for c in child_subgraph.children]
            if child_subgraph.parent is None and copy.id not in subgraph.children:
                subgraph.children.append(copy.id)
            parent.subgraphs.append(copy)

        merged_links = 0
        for link in child.links:
            if link.is_export or is_export_link_id(link.id):
                continue
            copy = link.model_copy(deep=True)
            if link.id:
                copy.id = f"{prefix}/{link.id}"
            parent.links.append(copy)
            merged_links += 1

        self.merge_pins(subgraph, child)

        self.logger.debug(
            f"Merged {merged_nodes} nodes, {len(child.subgraphs)} subgraphs and "
            f"{merged_links} links into '{prefix}'"
        )

    def merge_pins(self, subgraph: Subgraph, child: NetworkGraph) -> None:
        """
        Combine the parent's declared pins with the child's resolved ones.

        The parent declares that a pin exists; the child declares which
        device and port it resolves to.
        """
        child_pins = child.pins or []
        if not child_pins:
            return

        if not subgraph.pins:
            subgraph.pins = [pin.model_copy(deep=True) for pin in child_pins]
            return

        declared = {pin.id: pin for pin in subgraph.pins}
        for child_pin in child_pins:
            parent_pin = declared.get(child_pin.id)
            if parent_pin is None:
                subgraph.pins.append(child_pin.model_copy(deep=True))
            elif not parent_pin.device and child_pin.device:
                parent_pin.device = child_pin.device
                parent_pin.port = child_pin.port

    @staticmethod
    def merge_sheets(sheets: Dict[str, NetworkGraph], child_sheets: Dict[str, NetworkGraph], prefix: str) -> None:
        """Copy a child's nested sheets under ``<prefix>/`` keys."""
        for sheet_id, sheet in child_sheets.items():
            sheets[f"{prefix}/{sheet_id}"] = sheet

    @staticmethod
    def _namespaced(prefix: str, parent_id):
        return f"{prefix}/{parent_id}" if parent_id else prefix
