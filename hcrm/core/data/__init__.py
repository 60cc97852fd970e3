"""
Card Data
=========

Everything the card shows before it is rendered.

Components:
- metrics: CPU and memory sampling
- quotes: hitokoto quote fetching
- assembler: composition into RenderData
"""
