"""
Tests for the command line interface.
"""

import json

import pytest

from shumoku.cli import build_parser, main

from conftest import DC1_YAML, MAIN_YAML


@pytest.fixture
def topology(tmp_path):
    directory = tmp_path / "topology"
    directory.mkdir()
    (directory / "main.yaml").write_text(MAIN_YAML, encoding="utf-8")
    (directory / "dc1.yaml").write_text(DC1_YAML, encoding="utf-8")
    return directory / "main.yaml"


@pytest.fixture
def broken_topology(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("nodes:\n  - id: a\nsubgraphs:\n  - id: gone\n    file: ./gone.yaml\n", encoding="utf-8")
    return path


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage: shumoku" in capsys.readouterr().out


def test_parser_defaults():
    args = build_parser().parse_args(["render", "main.yaml"])
    assert args.format == "svg"
    assert args.output is None
    assert not args.force


def test_render_svg_to_file(topology, tmp_path, capsys):
    output = tmp_path / "out" / "network.svg"
    assert main(["render", str(topology), "-o", str(output)]) == 0

    svg = output.read_text(encoding="utf-8")
    assert svg.startswith("<svg")
    assert "Wrote" in capsys.readouterr().err


def test_render_to_stdout(topology, capsys):
    assert main(["render", str(topology)]) == 0
    assert capsys.readouterr().out.startswith("<svg")


def test_render_hierarchical_html(topology, tmp_path):
    output = tmp_path / "network.html"
    assert main(["render", str(topology), "-f", "html", "-o", str(output)]) == 0
    assert output.read_text(encoding="utf-8").count('class="sheet-container"') == 2


def test_render_flat_html(topology, tmp_path):
    output = tmp_path / "network.html"
    assert main(["render", str(topology), "-f", "html", "--flat", "-o", str(output)]) == 0
    assert 'class="sheet-container"' not in output.read_text(encoding="utf-8")


def test_render_refuses_errors_without_force(broken_topology, tmp_path, capsys):
    output = tmp_path / "broken.svg"
    assert main(["render", str(broken_topology), "-o", str(output)]) == 1
    assert not output.exists()
    assert "FILE_LOAD_ERROR" in capsys.readouterr().err

    assert main(["render", str(broken_topology), "-o", str(output), "--force"]) == 0
    assert output.exists()


def test_render_missing_file(tmp_path, capsys):
    assert main(["render", str(tmp_path / "nope.yaml")]) == 1
    assert "Error" in capsys.readouterr().err


def test_parse_summary(topology, capsys):
    assert main(["parse", str(topology)]) == 0
    out = capsys.readouterr().out
    assert "4 nodes, 3 links, 2 subgraphs" in out
    assert "Sheets: root, dc1" in out
    assert "dc1.yaml" in out


def test_parse_json(topology, capsys):
    assert main(["parse", str(topology), "--json"]) == 0
    document = json.loads(capsys.readouterr().out)
    assert {node["id"] for node in document["nodes"]} == {"edge-rtr", "core-sw", "r1", "srv1"}
    assert set(document["sheets"]) == {"root", "dc1"}


def test_parse_reports_errors(broken_topology, capsys):
    assert main(["parse", str(broken_topology)]) == 1
    assert "warning(s)" in capsys.readouterr().err
