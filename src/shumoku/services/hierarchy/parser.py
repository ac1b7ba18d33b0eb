"""
Hierarchical topology parser.

Resolves ``file:`` references on subgraphs recursively, merges every
child document into the subgraph it fills, resolves pin references to
concrete device ports and keeps a standalone view of each sheet.
"""

from typing import Dict, FrozenSet, List, Optional, Tuple

from ...shared.infrastructure.monitoring import get_logger, get_metrics, timed_operation
from ...shared.models import (
    ROOT_SHEET_ID, HierarchicalNetworkGraph, NetworkGraph, is_pin_reference,
)
from .connectors import (
    annotate_export_connectors, generate_export_connectors,
    pins_to_boundary_ports, resolve_pin_references,
)
from .merger import GraphMerger
from .models import HierarchicalParseResult, ParseWarning, Severity, WarningCode
from .resolvers import FileResolver
from .yaml_parser import YamlParser


class HierarchicalParser:
    """
    Parses a topology document together with every document it references.

    Cycle detection uses the set of documents on the current inclusion
    path, passed down explicitly through the recursion. A document may
    therefore be included from two different places (a diamond) but
    never from inside itself.

    Example:
        parser = HierarchicalParser(FileSystemResolver())
        result = await parser.parse(text, "topology/main.yaml")
        if result.has_errors:
            ...
    """

    def __init__(self, resolver: FileResolver, yaml_parser: Optional[YamlParser] = None):
        """
        Initialize the parser.

        Args:
            resolver: Source of referenced documents
            yaml_parser: Single-document parser (a default one is created if omitted)
        """
        self.resolver = resolver
        self.yaml_parser = yaml_parser or YamlParser()
        self.merger = GraphMerger()
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()
        self._loaded_files: List[str] = []

    @property
    def loaded_files(self) -> List[str]:
        """Child documents read during the most recent parse, in load order."""
        return list(self._loaded_files)

    def reset(self) -> None:
        """Forget the record of loaded files."""
        self._loaded_files.clear()

    @timed_operation("hierarchy_parse_duration")
    async def parse(self, text: str, base_path: str) -> HierarchicalParseResult:
        """
        Parse a top-level document and everything it references.

        Args:
            text: Top-level document text
            base_path: Path of the top-level document, used to resolve references

        Returns:
            Merged graph, sheet views and any warnings

        Raises:
            GraphParseError: If the top-level document itself cannot be parsed
        """
        self.reset()
        root_path = self.resolver.normalize(base_path)
        warnings: List[ParseWarning] = []

        graph, sheets, own_view = await self._parse_document(
            text, root_path, frozenset({root_path}), warnings, sheet_id=None,
        )

        all_sheets: Dict[str, NetworkGraph] = {ROOT_SHEET_ID: own_view}
        all_sheets.update(sheets)
        graph.sheets = all_sheets

        unresolved = sum(
            1 for link in graph.links
            for endpoint in (link.from_, link.to)
            if is_pin_reference(endpoint)
        )
        if unresolved:
            self.logger.warning(f"{unresolved} pin reference(s) could not be resolved to a device")

        for warning in warnings:
            self.logger.warning(str(warning))
        self.metrics.gauge("hierarchy_sheets", len(all_sheets))

        self.logger.info(
            f"Parsed {base_path}: {len(graph.nodes)} nodes, {len(graph.links)} links, "
            f"{len(all_sheets)} sheets, {len(warnings)} warnings"
        )

        return HierarchicalParseResult(graph=graph, sheets=all_sheets, warnings=warnings)

    async def _parse_document(
        self,
        text: str,
        path: str,
        visited: FrozenSet[str],
        warnings: List[ParseWarning],
        sheet_id: Optional[str],
    ) -> Tuple[HierarchicalNetworkGraph, Dict[str, NetworkGraph], NetworkGraph]:
        """
        Parse one document and recurse into its children.

        Returns:
            Merged graph, nested sheets keyed relative to this document,
            and the document's own unmerged view
        """
        base = self.yaml_parser.parse(text)

        own_view = base.model_copy(deep=True)
        pins_to_boundary_ports(own_view)

        graph = HierarchicalNetworkGraph(**dict(base))
        if sheet_id is not None:
            graph.parent_sheet = sheet_id.rsplit("/", 1)[0] if "/" in sheet_id else ROOT_SHEET_ID
            graph.breadcrumb = self._breadcrumb(sheet_id)

        sheets: Dict[str, NetworkGraph] = {}

        for subgraph in list(graph.subgraphs):
            if not subgraph.file:
                continue

            child_path = self.resolver.resolve(path, subgraph.file)
            if child_path in visited:
                warnings.append(ParseWarning(
                    code=WarningCode.CIRCULAR_REFERENCE,
                    message=f"Circular file reference detected: {child_path}",
                    severity=Severity.ERROR,
                    path=child_path,
                    subgraph_id=subgraph.id,
                ))
                self.metrics.counter("hierarchy_warnings", tags={'code': WarningCode.CIRCULAR_REFERENCE.value})
                continue

            child_sheet_id = f"{sheet_id}/{subgraph.id}" if sheet_id else subgraph.id
            try:
                content = await self.resolver.read(child_path)
                child, child_sheets, _ = await self._parse_document(
                    content, child_path, visited | {child_path}, warnings, sheet_id=child_sheet_id,
                )
            except Exception as e:
                warnings.append(ParseWarning(
                    code=WarningCode.FILE_LOAD_ERROR,
                    message=f"Failed to load {subgraph.file}: {e}",
                    severity=Severity.ERROR,
                    path=child_path,
                    subgraph_id=subgraph.id,
                ))
                self.metrics.counter("hierarchy_warnings", tags={'code': WarningCode.FILE_LOAD_ERROR.value})
                continue

            self._loaded_files.append(child_path)
            self.metrics.counter("hierarchy_files_loaded")

            sheet = child.model_copy(deep=True)
            sheet.sheets = {}
            sheets[subgraph.id] = sheet
            self.merger.merge_sheets(sheets, child_sheets, subgraph.id)
            self.merger.merge(graph, child, subgraph)

        annotate_export_connectors(graph, sheets)
        resolve_pin_references(graph)

        if sheet_id is not None:
            generate_export_connectors(graph)

        return graph, sheets, own_view

    @staticmethod
    def _breadcrumb(sheet_id: str) -> List[str]:
        parts = sheet_id.split("/")
        return [ROOT_SHEET_ID] + ["/".join(parts[:i + 1]) for i in range(len(parts))]
