"""
Data Models
===========

Pydantic models shared by the data acquisition and rendering layers.
"""
