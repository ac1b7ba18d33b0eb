"""
Base models for Shumoku.
"""

from typing import Any, Dict
from pydantic import BaseModel as PydanticBaseModel, Field


class BaseModel(PydanticBaseModel):
    """
    Base model for all Shumoku data structures.

    Provides common configuration and utilities.
    """

    model_config = {
        # Allow field population by name or alias
        "populate_by_name": True,
        # Validate assignments after object creation
        "validate_assignment": True,
        # Use enum values instead of enum names
        "use_enum_values": True,
        # Documents may carry keys this version does not model
        "extra": "ignore",
    }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with document (camelCase) keys, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class MetadataMixin(PydanticBaseModel):
    """
    Mixin to add metadata field to models.
    """
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional metadata")

    def get_metadata(self, key: str, default: Any = None) -> Any:
        """Get a metadata value."""
        return self.metadata.get(key, default)
