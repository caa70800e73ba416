"""Quota splitting: bucket shares, host/node spread, sums and rounding boundaries."""

import random

import pytest

from placement.balancing.host_buckets import bucket_hosts
from placement.balancing.quota import bucket_quotas, distribute, split
from placement.domain.exceptions import PlacementInvariantError
from placement.domain.models import Node


def _host_totals(goals):
    totals = {}
    for node, count in goals.items():
        totals[node.host] = totals.get(node.host, 0) + count
    return totals


def test_bucket_quotas_example_833_167(generate_nodes):
    buckets = bucket_hosts(generate_nodes(0, 40, 5) + generate_nodes(100, 10, 4))
    quotas = bucket_quotas(1000, buckets)
    assert quotas == {4: 167, 5: 833}
    assert list(quotas) == [4, 5]
    assert sum(quotas.values()) == 1000


def test_single_bucket_gets_everything(generate_nodes):
    buckets = bucket_hosts(generate_nodes(0, 7, 3))
    assert bucket_quotas(31, buckets) == {3: 31}
    assert bucket_quotas(0, buckets) == {}


def test_varying_nodes_per_host(generate_nodes):
    # 2x1 + 5x2 + 7x3 + 1x4 = 37 slots
    nodes = generate_nodes(0, 7, 3) + generate_nodes(10, 2, 1) + generate_nodes(12, 5, 2) + generate_nodes(17, 1, 4)
    assert bucket_quotas(31, bucket_hosts(nodes)) == {1: 2, 2: 8, 3: 18, 4: 3}

    # 11x4 + 5x2 = 54 slots
    nodes = generate_nodes(20, 11, 4) + generate_nodes(40, 5, 2)
    assert bucket_quotas(31, bucket_hosts(nodes)) == {2: 6, 4: 25}


def test_tiny_bucket_rounds_to_zero(generate_nodes):
    nodes = generate_nodes(0, 100, 5) + generate_nodes(200, 2, 1)
    assert bucket_quotas(31, bucket_hosts(nodes)) == {5: 31}

    nodes += generate_nodes(202, 98, 1)
    assert bucket_quotas(31, bucket_hosts(nodes)) == {1: 5, 5: 26}


def test_rounding_shortfall_goes_to_largest_remainder(generate_nodes):
    # three buckets with 6 slots each
    nodes = generate_nodes(0, 6, 1) + generate_nodes(10, 3, 2) + generate_nodes(20, 2, 3)
    buckets = bucket_hosts(nodes)
    assert bucket_quotas(1, buckets) == {1: 1}
    assert bucket_quotas(2, buckets) == {1: 1, 2: 1}
    assert bucket_quotas(4, buckets) == {1: 2, 2: 1, 3: 1}


def test_half_share_rounds_up_in_bucket_order(generate_nodes):
    # two buckets with 2 slots each
    buckets = bucket_hosts(generate_nodes(0, 2, 1) + generate_nodes(10, 1, 2))
    assert bucket_quotas(1, buckets) == {1: 1}
    assert bucket_quotas(3, buckets) == {1: 2, 2: 1}


@pytest.mark.parametrize(
    "layout",
    [
        [(6, 1), (3, 2), (2, 3)],
        [(1, 1), (1, 2), (1, 3), (1, 4), (1, 5), (1, 6), (1, 7)],
        [(7, 1), (5, 2), (3, 3), (2, 5), (1, 11)],
        [(13, 2), (1, 3)],
    ],
)
def test_quotas_always_sum_to_tablet_count(generate_nodes, layout):
    nodes = []
    start = 0
    for num_hosts, per_host in layout:
        nodes += generate_nodes(start, num_hosts, per_host)
        start += num_hosts
    buckets = bucket_hosts(nodes)
    for num_tablets in range(0, 300):
        quotas = bucket_quotas(num_tablets, buckets)
        assert sum(quotas.values()) == num_tablets
        assert all(q > 0 for q in quotas.values())


def test_no_buckets():
    assert bucket_quotas(0, {}) == {}
    with pytest.raises(PlacementInvariantError, match="no nodes"):
        bucket_quotas(3, {})


def test_negative_tablets_rejected(generate_nodes):
    with pytest.raises(ValueError, match="num_tablets"):
        bucket_quotas(-1, bucket_hosts(generate_nodes(0, 1, 1)))


def test_distribute_floor_and_remainder():
    assert distribute(10, ["a", "b", "c"]) == [("a", 4), ("b", 3), ("c", 3)]
    assert distribute(2, ["a", "b", "c"]) == [("a", 1), ("b", 1)]
    assert distribute(0, ["a"]) == []
    assert distribute(5, []) == []


def test_single_host_three_nodes_ten_tablets(generate_nodes):
    goals = split(10, bucket_hosts(generate_nodes(0, 1, 3)), "20010101")
    assert sorted(goals.values()) == [3, 3, 4]
    assert set(goals) == set(generate_nodes(0, 1, 3))


def test_split_sum_and_spread(generate_nodes):
    nodes = generate_nodes(0, 40, 5) + generate_nodes(100, 10, 4)
    buckets = bucket_hosts(nodes)
    goals = split(1000, buckets, "20010101")
    assert sum(goals.values()) == 1000

    host_totals = _host_totals(goals)
    for k, hosts in buckets.items():
        counts = [host_totals.get(host, 0) for host in hosts]
        assert max(counts) - min(counts) <= 1
        for host_nodes in hosts.values():
            per_node = [goals.get(node, 0) for node in host_nodes]
            assert max(per_node) - min(per_node) <= 1

    assert sum(host_totals[h] for h in buckets[5]) == 833
    assert sum(host_totals[h] for h in buckets[4]) == 167


def test_split_deterministic_regardless_of_input_order(generate_nodes):
    nodes = generate_nodes(0, 9, 3) + generate_nodes(20, 4, 2) + generate_nodes(30, 1, 1)
    shuffled = list(nodes)
    random.Random(11).shuffle(shuffled)
    first = split(77, bucket_hosts(nodes), "20010105")
    second = split(77, bucket_hosts(shuffled), "20010105")
    assert first == second
    assert list(first.items()) == list(second.items())


def test_split_differs_between_groups(generate_nodes):
    buckets = bucket_hosts(generate_nodes(0, 10, 3))
    assert split(31, buckets, "20010101") != split(31, buckets, "20010102")


def test_fewer_tablets_than_hosts_one_each(generate_nodes):
    buckets = bucket_hosts(generate_nodes(0, 19, 3))
    goals = split(10, buckets, "20010101")
    assert sum(goals.values()) == 10
    assert set(_host_totals(goals).values()) == {1}


def test_whole_host_removal_never_lowers_other_goals(generate_nodes):
    nodes = generate_nodes(0, 10, 3)
    before = split(31, bucket_hosts(nodes), "20010120")
    remaining = [n for n in nodes if n.host != "host00009"]
    after = split(31, bucket_hosts(remaining), "20010120")
    for node in remaining:
        assert after.get(node, 0) >= before.get(node, 0)


@pytest.mark.parametrize("group", ["20010101", "20010102", "20010117", "null"])
def test_single_node_removal_changes_few_goals(generate_nodes, group):
    nodes = generate_nodes(0, 10, 3)
    removed = Node("host00003", 9998)
    before = split(31, bucket_hosts(nodes), group)
    after = split(31, bucket_hosts([n for n in nodes if n != removed]), group)
    assert sum(after.values()) == 31

    # host00003 moves to a bucket of its own: 2 of 29 slots, one tablet per node
    host_before = _host_totals(before)["host00003"]
    assert _host_totals(after)["host00003"] == 2
    assert after[Node("host00003", 9997)] == after[Node("host00003", 9999)] == 1

    # the tablets it gives up land one each on the next hosts in line
    changed = [n for n in nodes if n.host != "host00003" and after.get(n, 0) != before.get(n, 0)]
    assert all(after.get(n, 0) - before.get(n, 0) == 1 for n in changed)
    assert len(changed) == host_before - 2
    assert len({n.host for n in changed}) == len(changed)
