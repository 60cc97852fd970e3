"""
Core Business Logic
==================

Core modules for producing the status card.

Modules:
- data: metrics sampling, quote fetching and template data assembly
- assets: background and font resolution
- rendering: DOM screenshot and vector rendering backends
- card: command entry point tying the pipeline together
"""
