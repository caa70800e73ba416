"""Balancing layer: host bucketing, quota splitting, stable assignment, reconciliation. No I/O."""

from placement.balancing.assigner import assign
from placement.balancing.host_buckets import bucket_hosts, total_slots
from placement.balancing.quota import bucket_quotas, distribute, split
from placement.balancing.reconciler import Balancer, all_nodes_partitioner

__all__ = [
    "Balancer",
    "all_nodes_partitioner",
    "assign",
    "bucket_hosts",
    "bucket_quotas",
    "distribute",
    "split",
    "total_slots",
]
