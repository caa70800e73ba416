"""Date-tiered node partitioning for shard days."""

import logging
from bisect import bisect_right
from datetime import date
from typing import Callable, Sequence

from placement.domain.exceptions import ConfigurationError
from placement.domain.models import Node
from placement.sharding.shard_day import NULL_GROUP, parse_shard_day
from placement.sharding.table_config import Tier

logger = logging.getLogger(__name__)


class TieredServerPartitioner:
    """
    Maps a shard day to the nodes of the tier covering its age.

    Called with a node snapshot, returns group -> eligible nodes. The tier used is the
    one with the largest days_back not above the shard's age; shards younger than every
    tier (future days) use the lowest tier, otherwise the highest. A tier whose pattern
    matches no node still owns its age range, so its shards get no nodes.
    today is read once per snapshot so a pass never straddles midnight.
    """

    def __init__(self, tiers: Sequence[Tier], today: Callable[[], date] = date.today) -> None:
        if not tiers:
            raise ConfigurationError("Tier configuration is not set")
        self._tiers = list(tiers)
        self._today = today

    def __call__(self, nodes: Sequence[Node]) -> Callable[[str], Sequence[Node]]:
        by_days_back: dict[int, list[Node]] = {tier.days_back: [] for tier in self._tiers}
        for node in sorted(set(nodes)):
            matched = [tier for tier in self._tiers if tier.matches(node.address)]
            if not matched:
                logger.warning("node_matches_no_tier", extra={"node": node.address})
            for tier in matched:
                tier_nodes = by_days_back[tier.days_back]
                if node not in tier_nodes:
                    tier_nodes.append(node)

        bounds = sorted(by_days_back)
        today = self._today()

        def nodes_for_group(group: str) -> Sequence[Node]:
            day = today if group == NULL_GROUP else parse_shard_day(group)
            age = (today - day).days
            idx = bisect_right(bounds, age) - 1
            if idx < 0:
                idx = 0 if age < 0 else len(bounds) - 1
            return by_days_back[bounds[idx]]

        return nodes_for_group
