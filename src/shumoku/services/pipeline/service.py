"""
Diagram pipeline: parse -> layout -> render.
"""

from typing import Dict, Optional

from ...shared.config.settings import Settings, get_settings
from ...shared.exceptions import HierarchyResolutionError, LayoutError, RenderError, ShumokuError
from ...shared.infrastructure.monitoring import get_logger, get_metrics, timed_operation
from ...shared.models import ROOT_SHEET_ID, NetworkGraph
from ..hierarchy import FileResolver, FileSystemResolver, HierarchicalParser, HierarchicalParseResult
from ..layout import LayoutEngine
from ..rendering import (
    HTMLOptions, RenderOptions, SheetData, SVGRenderer, render_hierarchical_html, render_html,
)
from .models import OutputFormat, RenderRequest


class DiagramPipeline:
    """
    Turns topology files into SVG or HTML.

    Parsing errors (any error-severity warning) stop the pipeline before
    layout unless the request allows them.
    """

    def __init__(self, settings: Optional[Settings] = None, resolver: Optional[FileResolver] = None):
        """
        Initialize the pipeline.

        Args:
            settings: Application settings (defaults to the global settings)
            resolver: Document source (defaults to the local filesystem)
        """
        self.settings = settings or get_settings()
        self.resolver = resolver or FileSystemResolver()
        self.parser = HierarchicalParser(self.resolver)
        self.layout_engine = LayoutEngine(self.settings)
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()

    async def parse_file(self, path: str) -> HierarchicalParseResult:
        """
        Read and parse a topology file with everything it references.

        Raises:
            FileResolutionError: If the file cannot be read
            GraphParseError: If the file is not a valid topology document
        """
        normalized = self.resolver.normalize(path)
        self.logger.info(f"Parsing {path}")
        text = await self.resolver.read(normalized)
        return await self.parser.parse(text, normalized)

    @timed_operation("pipeline_render_duration")
    async def render_file(self, path: str, request: Optional[RenderRequest] = None) -> str:
        """
        Parse, lay out and render a topology file.

        Args:
            path: Top-level topology document
            request: Output format and options

        Returns:
            SVG or HTML document

        Raises:
            HierarchyResolutionError: If parsing reported errors and they are not allowed
            LayoutError: If layout fails
            RenderError: If rendering fails
        """
        request = request or RenderRequest()
        result = await self.parse_file(path)

        if result.has_errors and not request.allow_errors:
            errors = [w for w in result.warnings if w.severity == "error"]
            raise HierarchyResolutionError(
                f"{len(errors)} error(s) while resolving {path}; use --force to render anyway",
                warnings=result.warnings,
            )

        return self.render_result(result, request)

    def render_result(self, result: HierarchicalParseResult, request: Optional[RenderRequest] = None) -> str:
        """Render an already parsed topology."""
        request = request or RenderRequest()
        options = self._render_options(request)

        hierarchical = request.hierarchical
        if hierarchical is None:
            hierarchical = len(result.sheets) > 1

        try:
            if request.output_format == OutputFormat.HTML and hierarchical:
                self.logger.info(f"Rendering {len(result.sheets)} sheets as HTML")
                return render_hierarchical_html(self._sheet_data(result), self._html_options(options))

            layout = self.layout_engine.layout(result.graph)
            if request.output_format == OutputFormat.HTML:
                self.logger.info("Rendering HTML page")
                return render_html(result.graph, layout, self._html_options(options))

            self.logger.info("Rendering SVG")
            return SVGRenderer(options).render(result.graph, layout)
        except ShumokuError:
            raise
        except Exception as e:
            self.metrics.counter("pipeline_render_errors")
            raise RenderError(f"Rendering failed: {e}") from e

    def _sheet_data(self, result: HierarchicalParseResult) -> Dict[str, SheetData]:
        sheets: Dict[str, SheetData] = {}
        for sheet_id, graph in result.sheets.items():
            sheets[sheet_id] = SheetData(
                graph=graph,
                layout=self._layout(graph, sheet_id),
                label=self._sheet_label(result.graph, sheet_id),
                parent_id=None if sheet_id == ROOT_SHEET_ID else getattr(graph, "parent_sheet", None),
            )
        return sheets

    def _layout(self, graph: NetworkGraph, sheet_id: str):
        try:
            return self.layout_engine.layout(graph)
        except LayoutError:
            self.logger.error(f"Layout failed for sheet '{sheet_id}'")
            raise

    @staticmethod
    def _sheet_label(merged: NetworkGraph, sheet_id: str) -> Optional[str]:
        subgraph = merged.get_subgraph(sheet_id)
        return subgraph.label if subgraph else None

    def _render_options(self, request: RenderRequest) -> RenderOptions:
        mode = "interactive" if request.interactive else self.settings.render_mode
        return RenderOptions(
            render_mode=mode,
            font_family=self.settings.font_family,
            theme=request.theme or self.settings.default_theme,
        )

    def _html_options(self, options: RenderOptions) -> HTMLOptions:
        return HTMLOptions(
            title=self.settings.html_title,
            toolbar=self.settings.html_toolbar,
            render=options,
        )
