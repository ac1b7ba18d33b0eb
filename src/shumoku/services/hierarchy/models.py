"""
Data models for hierarchical parsing.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from ...shared.models import BaseModel, HierarchicalNetworkGraph, NetworkGraph


class WarningCode(str, Enum):
    CIRCULAR_REFERENCE = "CIRCULAR_REFERENCE"
    FILE_LOAD_ERROR = "FILE_LOAD_ERROR"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class ParseWarning(BaseModel):
    """A non-fatal problem found while resolving a document hierarchy."""

    code: WarningCode = Field(..., description="Warning category")
    message: str = Field(..., description="Human-readable description")
    severity: Severity = Field(default=Severity.ERROR)
    path: Optional[str] = Field(default=None, description="Resolved path involved")
    subgraph_id: Optional[str] = Field(default=None, description="Subgraph whose file was skipped")

    def __str__(self) -> str:
        return f"[{self.severity}] {self.code}: {self.message}"


class HierarchicalParseResult(BaseModel):
    """
    Outcome of one top-level parse.

    ``graph`` is the merged graph; ``sheets`` holds each sheet's standalone
    view keyed by sheet id (``root`` for the top-level document).
    """

    graph: HierarchicalNetworkGraph
    sheets: Dict[str, NetworkGraph] = Field(default_factory=dict)
    warnings: List[ParseWarning] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Whether any error-severity warning was emitted."""
        return any(w.severity == Severity.ERROR for w in self.warnings)
