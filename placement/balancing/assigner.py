"""Stable assignment: reconcile current tablet locations against per-node goal counts."""

from typing import Mapping, Optional, Sequence

from placement.domain.exceptions import PlacementInvariantError
from placement.domain.models import GoalCounts, Node, Tablet


def assign(
    tablets: Sequence[Tablet],
    current: Mapping[Tablet, Optional[Node]],
    goals: GoalCounts,
) -> dict[Tablet, Node]:
    """
    Destination per tablet. Pass 1 keeps every tablet whose current node still has
    goal budget; pass 2 gives the rest to the first node (goal order) with budget left.
    Both entry points of the balancer go through here so they never disagree.
    Returns {} when there are no goals (no eligible nodes). goals is not mutated.
    """
    if not goals:
        return {}

    budget = {node: count for node, count in goals.items() if count > 0}
    destinations: dict[Tablet, Node] = {}

    for tablet in tablets:
        node = current.get(tablet)
        if node is not None and budget.get(node, 0) > 0:
            destinations[tablet] = node
            budget[node] -= 1
            if budget[node] == 0:
                del budget[node]

    if len(destinations) < len(tablets):
        for tablet in tablets:
            if tablet in destinations:
                continue
            if not budget:
                raise PlacementInvariantError(
                    f"no goal budget left for tablet {tablet}; goals sum to less than the tablet count"
                )
            node = next(iter(budget))
            destinations[tablet] = node
            budget[node] -= 1
            if budget[node] == 0:
                del budget[node]

    if budget:
        raise PlacementInvariantError(
            f"{sum(budget.values())} goal slots left unused after placing {len(tablets)} tablets"
        )
    return destinations
