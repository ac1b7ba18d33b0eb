"""
Centralized configuration management for Shumoku.

All environment variables and settings are managed here so the parser,
layout engine, renderer and CLI share one source of defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Centralized settings for Shumoku.

    All configuration is loaded from ``SHUMOKU_*`` environment variables
    (or a ``.env`` file) with sensible defaults.
    """

    # === Application Settings ===
    app_name: str = Field(default="Shumoku", description="Application name")
    app_version: str = Field(default="0.4.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file path")

    # === Rendering Settings ===
    default_theme: str = Field(default="light", description="Theme used when a document sets none")
    render_mode: str = Field(default="static", description="SVG render mode (static or interactive)")
    font_family: str = Field(
        default='-apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif',
        description="Font family for all SVG text",
    )
    html_toolbar: bool = Field(default=True, description="Include toolbar in HTML output")
    html_title: str = Field(default="Network Diagram", description="Default HTML page title")

    # === Layout Settings ===
    layout_seed: int = Field(default=42, description="Seed for the force-directed layout")
    node_width: float = Field(default=140.0, description="Minimum node width")
    node_height: float = Field(default=80.0, description="Minimum node height")
    node_spacing: float = Field(default=60.0, description="Gap between neighbouring nodes")
    rank_spacing: float = Field(default=80.0, description="Gap between layers")
    subgraph_padding: float = Field(default=40.0, description="Padding around subgraph members")

    # === Monitoring Settings ===
    enable_metrics: bool = Field(default=True, description="Enable metrics collection")
    metrics_history: int = Field(default=1000, description="Timer samples kept per metric")

    # === Logging Configuration ===
    @property
    def logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return {
            'level': self.log_level,
            'file': str(self.log_file) if self.log_file else None,
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        }

    # === Monitoring Configuration ===
    @property
    def monitoring_config(self) -> Dict[str, Any]:
        """Get monitoring configuration."""
        return {
            'enabled': self.enable_metrics,
            'max_history': self.metrics_history,
            'retention_seconds': 3600,
        }

    # === Layout Configuration ===
    @property
    def layout_config(self) -> Dict[str, Any]:
        """Get layout configuration."""
        return {
            'seed': self.layout_seed,
            'node_width': self.node_width,
            'node_height': self.node_height,
            'node_spacing': self.node_spacing,
            'rank_spacing': self.rank_spacing,
            'subgraph_padding': self.subgraph_padding,
        }

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator('default_theme')
    @classmethod
    def validate_theme(cls, v):
        if v.lower() not in {'light', 'dark'}:
            raise ValueError("Theme must be 'light' or 'dark'")
        return v.lower()

    @field_validator('render_mode')
    @classmethod
    def validate_render_mode(cls, v):
        if v.lower() not in {'static', 'interactive'}:
            raise ValueError("Render mode must be 'static' or 'interactive'")
        return v.lower()

    model_config = {
        "env_prefix": "SHUMOKU_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once per application lifecycle.
    """
    return Settings()
