# src/civictrack/scripts/__init__.py
"""Operational command-line helpers."""
