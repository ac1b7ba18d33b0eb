"""
Hierarchical topology resolution.

Parses a topology document, follows ``file:`` references on subgraphs,
merges child documents, detects circular references and resolves
cross-sheet pins.
"""

from .connectors import (
    annotate_export_connectors, build_pin_map, generate_export_connectors,
    is_export_link_id, is_export_node_id, resolve_pin_references,
)
from .merger import GraphMerger
from .models import HierarchicalParseResult, ParseWarning, Severity, WarningCode
from .parser import HierarchicalParser
from .resolvers import FileResolver, FileSystemResolver, MemoryFileResolver
from .yaml_parser import YamlParser

__all__ = [
    "HierarchicalParser",
    "HierarchicalParseResult",
    "ParseWarning",
    "Severity",
    "WarningCode",
    "GraphMerger",
    "FileResolver",
    "FileSystemResolver",
    "MemoryFileResolver",
    "YamlParser",
    "annotate_export_connectors",
    "build_pin_map",
    "generate_export_connectors",
    "is_export_link_id",
    "is_export_node_id",
    "resolve_pin_references",
]
