# src/civictrack/services/__init__.py
"""Stateless helpers shared by the storage backends."""

from .geo import haversine_km, within_radius

__all__ = ["haversine_km", "within_radius"]
