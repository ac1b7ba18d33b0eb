"""
Tests for the parse -> layout -> render pipeline.
"""

import pytest

from shumoku.services.hierarchy import MemoryFileResolver
from shumoku.services.pipeline import DiagramPipeline, OutputFormat, RenderRequest
from shumoku.shared.config.settings import Settings
from shumoku.shared.exceptions import (
    FileResolutionError, HierarchyResolutionError, RenderError,
)
from shumoku.shared.infrastructure.monitoring import get_metrics


@pytest.fixture
def pipeline(memory_resolver):
    return DiagramPipeline(Settings(), memory_resolver)


class TestDiagramPipeline:

    @pytest.mark.asyncio
    async def test_parse_file(self, pipeline):
        result = await pipeline.parse_file("topology/main.yaml")
        assert set(result.sheets) == {"root", "dc1"}
        assert not result.has_errors

    @pytest.mark.asyncio
    async def test_render_svg(self, pipeline):
        svg = await pipeline.render_file("/topology/main.yaml")

        assert svg.startswith("<svg")
        assert 'data-id="core-sw"' in svg
        assert 'data-has-sheet="true" data-sheet-id="dc1"' in svg
        assert get_metrics().get_timer_stats("pipeline_render_duration")["count"] == 1

    @pytest.mark.asyncio
    async def test_html_is_hierarchical_for_multiple_sheets(self, pipeline):
        html = await pipeline.render_file("/topology/main.yaml", RenderRequest(output_format=OutputFormat.HTML))

        assert html.count('class="sheet-container"') == 2
        assert 'data-sheet-id="dc1" data-label="Data Center 1" data-parent-id="root"' in html
        # the child sheet shows its export connector
        assert 'class="node export-connector"' in html

    @pytest.mark.asyncio
    async def test_flat_html(self, pipeline):
        request = RenderRequest(output_format="html", hierarchical=False)
        html = await pipeline.render_file("/topology/main.yaml", request)

        assert 'class="sheet-container"' not in html
        assert '<div id="diagram"><svg' in html

    @pytest.mark.asyncio
    async def test_single_sheet_html_is_flat(self):
        resolver = MemoryFileResolver({"/one.yaml": "nodes:\n  - id: a\n"})
        html = await DiagramPipeline(Settings(), resolver).render_file(
            "/one.yaml", RenderRequest(output_format="html"),
        )
        assert 'class="sheet-container"' not in html

    @pytest.mark.asyncio
    async def test_request_options_reach_renderer(self, pipeline):
        request = RenderRequest(interactive=True, theme="dark")
        svg = await pipeline.render_file("/topology/main.yaml", request)

        assert 'data-device-json="' in svg
        assert 'style="background: #1e293b"' in svg

    @pytest.mark.asyncio
    async def test_errors_stop_rendering(self):
        resolver = MemoryFileResolver({
            "/main.yaml": "nodes:\n  - id: a\nsubgraphs:\n  - id: gone\n    file: gone.yaml\n",
        })
        pipeline = DiagramPipeline(Settings(), resolver)

        with pytest.raises(HierarchyResolutionError) as exc_info:
            await pipeline.render_file("/main.yaml")
        assert "use --force" in str(exc_info.value)
        assert exc_info.value.warnings[0].code == "FILE_LOAD_ERROR"

        svg = await pipeline.render_file("/main.yaml", RenderRequest(allow_errors=True))
        assert 'data-id="a"' in svg

    @pytest.mark.asyncio
    async def test_missing_top_level_file(self, pipeline):
        with pytest.raises(FileResolutionError):
            await pipeline.render_file("/nowhere.yaml")
        assert get_metrics().get_timer_stats("pipeline_render_duration_error")["count"] == 1

    @pytest.mark.asyncio
    async def test_unexpected_render_failure_is_wrapped(self, pipeline, mocker):
        mocker.patch(
            "shumoku.services.pipeline.service.SVGRenderer.render",
            side_effect=ValueError("boom"),
        )
        with pytest.raises(RenderError, match="boom"):
            await pipeline.render_file("/topology/main.yaml")
        assert get_metrics().get_counter("pipeline_render_errors") == 1
