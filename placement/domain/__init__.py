"""Domain layer: placement value objects and exceptions. Pure, no I/O."""

from placement.domain.exceptions import ConfigurationError, PlacementError, PlacementInvariantError
from placement.domain.models import BalanceResult, GoalCounts, HostBuckets, Migration, Node, Tablet

__all__ = [
    "BalanceResult",
    "ConfigurationError",
    "GoalCounts",
    "HostBuckets",
    "Migration",
    "Node",
    "PlacementError",
    "PlacementInvariantError",
    "Tablet",
]
