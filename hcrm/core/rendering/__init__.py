"""
Rendering Module
===============

Turn RenderData into a PNG image.

Components:
- html_generator: Jinja2 card document for the browser backend
- png_generator: Playwright page handling and element screenshots
- layout: flex node tree and layout engine for the vector backend
- svg_generator: font outline painting and SVG rasterization
- backends: render mode registry
"""
