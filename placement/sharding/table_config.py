"""Shard table balancer configuration parsed from table properties.

    table.custom.volume.tier.names=t1,t2
    table.custom.volume.tiered.t1.days.back=0
    table.custom.volume.tiered.t1.tservers=host0000.*
    table.custom.volume.tiered.t2.days.back=20
    table.custom.volume.tiered.t2.tservers=host000[1-9].*
    table.custom.sharded.balancer.max.migrations=1000

Shards 0-19 days old go to nodes whose host:port matches t1's regex, older shards to t2's.
Tiers may share nodes.
"""

import re
from typing import List, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from placement.domain.exceptions import ConfigurationError

TIER_NAMES_PROPERTY = "table.custom.volume.tier.names"
TIER_PROPERTY_PREFIX = "table.custom.volume.tiered."
DAYS_BACK_SUFFIX = ".days.back"
NODES_SUFFIX = ".tservers"
MAX_MIGRATIONS_PROPERTY = "table.custom.sharded.balancer.max.migrations"
DEFAULT_MAX_MIGRATIONS = 10000


class Tier(BaseModel):
    """Data-age tier: shards at least days_back old may use nodes matching pattern."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    days_back: int = Field(..., ge=0)
    pattern: re.Pattern = Field(..., description="Full-match regex on host:port")

    def matches(self, address: str) -> bool:
        return self.pattern.fullmatch(address) is not None


class ShardTableConfig(BaseModel):
    """Resolved tiers and migration cap for one shard table."""

    model_config = ConfigDict(frozen=True)

    tiers: List[Tier] = Field(..., min_length=1)
    max_migrations: int = Field(DEFAULT_MAX_MIGRATIONS, ge=0)

    @classmethod
    def from_properties(
        cls,
        properties: Mapping[str, str],
        default_max_migrations: int = DEFAULT_MAX_MIGRATIONS,
    ) -> "ShardTableConfig":
        """Parse table properties. Missing or malformed values raise ConfigurationError."""
        raw_names = properties.get(TIER_NAMES_PROPERTY)
        names = [n.strip() for n in (raw_names or "").split(",") if n.strip()]
        if not names:
            raise ConfigurationError("Tier configuration is not set")

        tiers = []
        for name in dict.fromkeys(names):
            days_back = _require(properties, f"{TIER_PROPERTY_PREFIX}{name}{DAYS_BACK_SUFFIX}")
            regex = _require(properties, f"{TIER_PROPERTY_PREFIX}{name}{NODES_SUFFIX}")
            tiers.append({"name": name, "days_back": days_back, "pattern": regex})

        max_migrations = (properties.get(MAX_MIGRATIONS_PROPERTY) or "").strip() or default_max_migrations

        try:
            return cls(tiers=tiers, max_migrations=max_migrations)
        except ValidationError as e:
            raise ConfigurationError(f"invalid shard balancer configuration: {e}") from e


def _require(properties: Mapping[str, str], key: str) -> str:
    value = properties.get(key)
    if value is None or not value.strip():
        raise ConfigurationError(f"{key} is not set")
    return value.strip()
