"""
schemac test suite.

This package contains:
- unit/: Unit tests for the declaration model, loader and analysis stage
"""
