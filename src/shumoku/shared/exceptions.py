"""
Common exceptions for Shumoku.
"""


class ShumokuError(Exception):
    """Base exception for all Shumoku errors."""
    pass


class ConfigurationError(ShumokuError):
    """Raised when there are configuration issues."""
    pass


class GraphParseError(ShumokuError):
    """Raised when a topology document cannot be parsed."""
    pass


class FileResolutionError(ShumokuError):
    """Raised when a referenced file cannot be read."""
    pass


class LayoutError(ShumokuError):
    """Raised when layout computation fails."""
    pass


class RenderError(ShumokuError):
    """Raised when a render pipeline stage fails."""
    pass


class HierarchyResolutionError(ShumokuError):
    """Raised when hierarchical parsing produced error-severity warnings."""

    def __init__(self, message: str, warnings=None):
        super().__init__(message)
        self.warnings = list(warnings or [])
