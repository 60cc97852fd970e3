"""
Test Suite
==========

Test suite matching the hcrm/ package structure.

Test Categories:
- unit: Unit tests for individual components
"""
