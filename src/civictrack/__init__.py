# src/civictrack/__init__.py
"""CivicTrack: municipal issue reporting API."""

__version__ = "1.0.0"
