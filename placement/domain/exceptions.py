"""Placement exceptions. Typed, no I/O."""


class PlacementError(Exception):
    """Base for all placement errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(PlacementError):
    """Raised when balancer configuration is missing or invalid (tiers, caps, settings)."""


class PlacementInvariantError(PlacementError):
    """Raised when goal counts and tablet counts disagree. Never caught by the balancer."""
