"""
Domain services for Shumoku.

Contains the main diagram services:
- hierarchy: resolves multi-file topologies into one graph plus sheets
- layout: assigns coordinates to nodes, links and subgraphs
- rendering: turns a graph and its layout into SVG/HTML
- navigation: zoom-driven movement between sheets
- pipeline: parse -> layout -> render
"""
