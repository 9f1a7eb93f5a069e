# src/civictrack/core/__init__.py
"""Core configuration, errors and logging."""
