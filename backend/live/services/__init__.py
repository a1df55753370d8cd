"""Live trading services."""

from live.services.position_manager import PositionAlreadyOpenError, PositionManager

__all__ = ["PositionAlreadyOpenError", "PositionManager"]
