"""Shared fixtures: node/tablet builders and a controllable clock."""

from datetime import date, timedelta

import pytest

from placement.domain.models import Node, Tablet


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms: int = 1_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


def _generate_nodes(start_host: int, num_hosts: int, nodes_per_host: int) -> list[Node]:
    return [
        Node(host=f"host{start_host + h:05d}", port=9997 + p)
        for h in range(num_hosts)
        for p in range(nodes_per_host)
    ]


def _create_shards(table_id: str, start_day: str, days: int, shards_per_day: int) -> list[Tablet]:
    first = date(int(start_day[:4]), int(start_day[4:6]), int(start_day[6:]))
    shards = []
    for d in range(days):
        prefix = (first + timedelta(days=d)).strftime("%Y%m%d")
        for s in range(shards_per_day):
            shards.append(Tablet(table_id=table_id, end_row=f"{prefix}_{s}"))
    return shards


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def generate_nodes():
    """generate_nodes(start_host, num_hosts, nodes_per_host) -> hosts host00000.. on ports 9997+."""
    return _generate_nodes


@pytest.fixture
def create_shards():
    """create_shards(table_id, "yyyyMMdd", days, shards_per_day) -> tablets with rows day_N."""
    return _create_shards
