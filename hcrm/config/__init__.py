"""
Configuration Management
=======================

Environment-based configuration using Pydantic Settings.

Components:
- settings: Application settings and card defaults
- logging: Structured logging configuration
"""
