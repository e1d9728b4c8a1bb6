"""Placement strategies that arrange shapes under the layout root."""

from content_core.placement.zones import ZonePlacementStrategy

__all__ = ["ZonePlacementStrategy"]
