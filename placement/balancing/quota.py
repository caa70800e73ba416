"""Quota splitting: a group's tablet count -> buckets -> hosts -> nodes.

Hosts running different numbers of nodes are kept in separate buckets. Rendezvous
balancing across all hosts at once would give hosts with fewer nodes more tablets
per node, so each bucket first receives a share proportional to its node slots and
is then split across its hosts and their nodes in rendezvous order.
"""

import logging
from typing import Dict, List, Sequence, Tuple, TypeVar

from placement.balancing.host_buckets import total_slots
from placement.domain.exceptions import PlacementInvariantError
from placement.domain.models import GoalCounts, HostBuckets, Node
from placement.hashing.ranker import rank

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _round_half_up(numerator: int, denominator: int) -> int:
    """round(numerator / denominator) with halves going up, in exact integer arithmetic."""
    return (2 * numerator + denominator) // (2 * denominator)


def bucket_quotas(num_tablets: int, buckets: HostBuckets) -> Dict[int, int]:
    """
    Split num_tablets across buckets by node-slot share, ascending by nodes per host.

    With 1000 tablets, 40 hosts x 5 nodes and 10 hosts x 4 nodes there are 240 slots:
    the 5-node bucket holds 200/240 of them and gets 833, the 4-node bucket gets 167.
    Half-up rounding can leave a few tablets over (three equal buckets, one tablet);
    those go one at a time to the buckets furthest below their exact share.
    Buckets with a zero quota are left out.
    """
    if num_tablets < 0:
        raise ValueError("num_tablets must be >= 0")
    if not buckets:
        if num_tablets:
            raise PlacementInvariantError(f"{num_tablets} tablets but no nodes to place them on")
        return {}
    if len(buckets) == 1:
        only = next(iter(buckets))
        return {only: num_tablets} if num_tablets else {}

    total = total_slots(buckets)
    remaining = num_tablets
    counts: Dict[int, int] = {}
    weighted: Dict[int, int] = {}

    for k in sorted(buckets):
        weighted[k] = num_tablets * k * len(buckets[k])
        quota = min(remaining, _round_half_up(weighted[k], total))
        if quota > 0:
            counts[k] = quota
            remaining -= quota

    if remaining > 0:
        # Shortfall in units of 1/total below each bucket's exact share; largest first.
        shortfall = sorted(
            ((weighted[k] - counts.get(k, 0) * total, k) for k in sorted(buckets)),
            key=lambda entry: (-entry[0], entry[1]),
        )
        logger.debug(
            "bucket_rounding_shortfall",
            extra={"num_tablets": num_tablets, "unplaced": remaining},
        )
        for _, k in shortfall:
            if remaining == 0:
                break
            counts[k] = counts.get(k, 0) + 1
            remaining -= 1
        counts = {k: counts[k] for k in sorted(counts)}

    if remaining != 0:
        raise PlacementInvariantError(
            f"{remaining} tablets are unassigned. Ensure the node tier patterns are correct"
        )
    return counts


def distribute(count: int, ranked: Sequence[T]) -> List[Tuple[T, int]]:
    """count // len each, one extra for the first count % len in rank order. Zeros omitted."""
    if not ranked:
        return []
    base, extra = divmod(count, len(ranked))
    out: List[Tuple[T, int]] = []
    for i, item in enumerate(ranked):
        share = base + 1 if i < extra else base
        if share > 0:
            out.append((item, share))
    return out


def host_goal_counts(num_tablets: int, hosts: Dict[str, List[Node]], group: str) -> Dict[str, int]:
    """Split a bucket's quota across its hosts in rendezvous order for group."""
    return dict(distribute(num_tablets, rank(hosts.keys(), group)))


def node_goal_counts(num_tablets: int, host: str, nodes: List[Node], group: str) -> GoalCounts:
    """Split a host's allotment across its nodes; salt is host:group."""
    ranked = rank(nodes, f"{host}:{group}", key=lambda node: node.address)
    return dict(distribute(num_tablets, ranked))


def split(num_tablets: int, buckets: HostBuckets, group: str) -> GoalCounts:
    """
    Goal tablet count per node for one group. Sums to num_tablets whenever there is at
    least one node. Iteration order: bucket ascending, hosts and nodes in rank order.
    """
    goals: GoalCounts = {}
    for k, quota in bucket_quotas(num_tablets, buckets).items():
        hosts = buckets[k]
        for host, host_quota in host_goal_counts(quota, hosts, group).items():
            for node, node_quota in node_goal_counts(host_quota, host, hosts[host], group).items():
                if node in goals:
                    raise PlacementInvariantError(f"node {node} appears in more than one bucket")
                goals[node] = node_quota

    placed = sum(goals.values())
    if placed != num_tablets:
        raise PlacementInvariantError(
            f"goal counts for group {group} sum to {placed}, expected {num_tablets}"
        )
    return goals
