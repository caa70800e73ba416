"""Rendezvous host placement for sharded tablets."""

from placement.balancing import Balancer, all_nodes_partitioner
from placement.domain import (
    BalanceResult,
    ConfigurationError,
    Migration,
    Node,
    PlacementError,
    PlacementInvariantError,
    Tablet,
)
from placement.sharding import build_shard_balancer

__all__ = [
    "BalanceResult",
    "Balancer",
    "ConfigurationError",
    "Migration",
    "Node",
    "PlacementError",
    "PlacementInvariantError",
    "Tablet",
    "all_nodes_partitioner",
    "build_shard_balancer",
]
