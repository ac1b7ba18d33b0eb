"""
Single-document YAML parser.

Turns the text of one topology document into a NetworkGraph. Hierarchy
(``file:`` references) is not followed here; see HierarchicalParser.
"""

from typing import Any, Dict, List

import yaml
from pydantic import ValidationError as PydanticValidationError

from ...shared.exceptions import GraphParseError
from ...shared.infrastructure.monitoring import get_logger
from ...shared.models import NetworkGraph


class YamlParser:
    """
    Parses a single YAML topology document.

    Missing ids are filled in positionally (``node-0``, ``link-3`` ...)
    and alias spellings are normalized by the graph models.
    """

    def __init__(self):
        self.logger = get_logger(__name__)

    def parse(self, text: str) -> NetworkGraph:
        """
        Parse document text.

        Args:
            text: YAML document

        Returns:
            Parsed graph

        Raises:
            GraphParseError: If the text is not valid YAML or not a topology mapping
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise GraphParseError(f"Invalid YAML: {e}") from e

        if not isinstance(data, dict):
            raise GraphParseError("Invalid YAML: expected object")

        document = dict(data)
        document['nodes'] = self._with_ids(data.get('nodes'), 'node')
        document['links'] = self._with_ids(data.get('links'), 'link', warn=False)
        for link in document['links']:
            for end in ('from', 'to'):
                if link.get(end) is not None and not isinstance(link[end], dict):
                    link[end] = str(link[end])
        document['subgraphs'] = self._with_ids(data.get('subgraphs'), 'subgraph')
        for subgraph in document['subgraphs']:
            if subgraph.get('pins'):
                subgraph['pins'] = self._with_ids(subgraph['pins'], 'pin')
        if data.get('pins'):
            document['pins'] = self._with_ids(data['pins'], 'pin')

        try:
            graph = NetworkGraph.model_validate(document)
        except PydanticValidationError as e:
            raise GraphParseError(f"Invalid topology document: {e}") from e

        self._assign_children(graph)
        return graph

    def _with_ids(self, items: Any, prefix: str, warn: bool = True) -> List[Dict[str, Any]]:
        if items is None:
            return []
        if not isinstance(items, list):
            raise GraphParseError(f"Expected a list of {prefix}s")

        result = []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise GraphParseError(f"{prefix.capitalize()} at index {index} is not a mapping")
            item = dict(item)
            if not item.get('id'):
                if warn:
                    self.logger.warning(f"{prefix.capitalize()} at index {index} missing id")
                item['id'] = f"{prefix}-{index}"
            else:
                item['id'] = str(item['id'])
            result.append(item)
        return result

    def _assign_children(self, graph: NetworkGraph) -> None:
        """Fill ``children`` of each subgraph from nested subgraph parents."""
        by_id = {subgraph.id: subgraph for subgraph in graph.subgraphs}
        for subgraph in graph.subgraphs:
            parent = by_id.get(subgraph.parent) if subgraph.parent else None
            if parent is not None and subgraph.id not in parent.children:
                parent.children.append(subgraph.id)
