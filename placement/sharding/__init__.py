"""Shard table collaborators: day classification, date-tiered node partitioning, table config."""

from placement.sharding.shard_balancer import build_shard_balancer
from placement.sharding.shard_day import EPOCH_DAY, NULL_GROUP, parse_shard_day, shard_day
from placement.sharding.table_config import DEFAULT_MAX_MIGRATIONS, ShardTableConfig, Tier
from placement.sharding.tiered_partitioner import TieredServerPartitioner

__all__ = [
    "DEFAULT_MAX_MIGRATIONS",
    "EPOCH_DAY",
    "NULL_GROUP",
    "ShardTableConfig",
    "Tier",
    "TieredServerPartitioner",
    "build_shard_balancer",
    "parse_shard_day",
    "shard_day",
]
