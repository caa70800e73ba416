"""Host bucketing: nodes grouped by host, hosts grouped by how many nodes they run."""

from typing import Iterable

from placement.domain.models import HostBuckets, Node


def bucket_hosts(nodes: Iterable[Node]) -> HostBuckets:
    """
    Return {nodes_per_host: {host: [nodes]}}. Duplicate nodes are collapsed and
    node lists are sorted, so the result does not depend on input order.
    """
    per_host: dict[str, set[Node]] = {}
    for node in nodes:
        per_host.setdefault(node.host, set()).add(node)

    buckets: HostBuckets = {}
    for host in sorted(per_host):
        host_nodes = sorted(per_host[host])
        buckets.setdefault(len(host_nodes), {})[host] = host_nodes
    return buckets


def total_slots(buckets: HostBuckets) -> int:
    """Total node slots: sum of k * hosts over all buckets."""
    return sum(k * len(hosts) for k, hosts in buckets.items())
