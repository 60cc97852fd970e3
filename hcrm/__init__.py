"""
HCRM Status Card
================

Renders a host status card (CPU/RAM usage, date and lunar date, greeting and
a remote quote) into a PNG image.

This package provides:
- Host metrics sampling and quote fetching
- Template data assembly for the card
- DOM screenshot rendering with Playwright
- Vector rendering through an in-memory flex layout, SVG and CairoSVG
"""

__version__ = "1.0.0"
__author__ = "HCRM Team"
