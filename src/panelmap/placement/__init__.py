"""Scan-time placement with location exclusivity."""

from .coordinator import PlacementCoordinator, ScanRequest

__all__ = ["PlacementCoordinator", "ScanRequest"]
