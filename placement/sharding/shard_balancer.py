"""Shard table balancer: shard-day groups, date-tiered nodes, table-configured migration cap.

Each shard day is balanced on its own, so adding or aging out a day does not disturb
the placement of any other day. Table properties are re-read on every call; a bad
configuration raises ConfigurationError before any placement is computed.
"""

from datetime import date
from typing import Any, Callable, Mapping, Optional, Sequence

from placement.balancing.reconciler import Balancer
from placement.config.settings import PlacementSettings, get_settings
from placement.domain.models import Node
from placement.sharding.shard_day import shard_day
from placement.sharding.table_config import ShardTableConfig
from placement.sharding.tiered_partitioner import TieredServerPartitioner

PropertiesProvider = Callable[[], Mapping[str, str]]


def build_shard_balancer(
    table_id: str,
    properties: PropertiesProvider,
    settings: Optional[PlacementSettings] = None,
    today: Optional[Callable[[], date]] = None,
    clock: Optional[Callable[[], int]] = None,
    metrics: Any = None,
) -> Balancer:
    """Balancer for a shard table whose tiers and cap live in its table properties."""
    settings = settings or get_settings()
    today = today or date.today

    def load_config() -> ShardTableConfig:
        return ShardTableConfig.from_properties(
            properties(), default_max_migrations=settings.max_migrations
        )

    def partitioner(nodes: Sequence[Node]) -> Callable[[str], Sequence[Node]]:
        return TieredServerPartitioner(load_config().tiers, today)(nodes)

    def max_migrations() -> int:
        return load_config().max_migrations

    return Balancer(
        table_id,
        classify=shard_day,
        partitioner=partitioner,
        max_migrations=max_migrations,
        min_pass_interval_ms=settings.min_pass_interval_ms,
        repoll_ms=settings.repoll_ms,
        clock=clock,
        metrics=metrics,
    )
