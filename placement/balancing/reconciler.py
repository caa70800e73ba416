"""Reconciliation loop: the two balancer entry points over snapshots.

compute_assignments places tablets that have no location; balance emits capped
migrations for located tablets. Both group tablets, compute goal counts per group
from the node snapshot and run the same stable assignment, so a tablet placed by
compute_assignments is never moved by the next balance unless membership changed.
Nothing but the last completed pass time is kept between calls.
"""

import logging
import time
import uuid
from typing import Any, Callable, Collection, Iterable, Mapping, Optional, Sequence, Union

from placement.balancing.assigner import assign
from placement.balancing.host_buckets import bucket_hosts
from placement.balancing.quota import split
from placement.core.context import pass_id_ctx, table_id_ctx
from placement.domain.models import BalanceResult, Migration, Node, Tablet

logger = logging.getLogger(__name__)

DEFAULT_REPOLL_MS = 5000
DEFAULT_MIN_PASS_INTERVAL_MS = 60000

Classifier = Callable[[Tablet], str]
GroupNodes = Callable[[str], Sequence[Node]]
ServerPartitioner = Callable[[Sequence[Node]], GroupNodes]


def all_nodes_partitioner(nodes: Sequence[Node]) -> GroupNodes:
    """Every group may use every node."""
    snapshot = list(nodes)
    return lambda group: snapshot


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class Balancer:
    """
    Rendezvous host balancer for one table. Strategies are injected:
    classify (tablet -> group), partitioner (node snapshot -> group -> eligible nodes)
    and max_migrations (cap, read once per balance pass).
    Not safe for concurrent calls on the same instance; instances are independent.
    """

    def __init__(
        self,
        table_id: str,
        classify: Classifier,
        partitioner: ServerPartitioner = all_nodes_partitioner,
        max_migrations: Union[int, Callable[[], int]] = 10000,
        min_pass_interval_ms: int = DEFAULT_MIN_PASS_INTERVAL_MS,
        repoll_ms: int = DEFAULT_REPOLL_MS,
        clock: Optional[Callable[[], int]] = None,
        metrics: Any = None,
    ) -> None:
        if min_pass_interval_ms < 0:
            raise ValueError("min_pass_interval_ms must be >= 0")
        if repoll_ms < 0:
            raise ValueError("repoll_ms must be >= 0")
        self._table_id = table_id
        self._classify = classify
        self._partitioner = partitioner
        if callable(max_migrations):
            self._max_migrations = max_migrations
        else:
            cap = max_migrations
            self._max_migrations = lambda: cap
        self._min_pass_interval_ms = min_pass_interval_ms
        self._repoll_ms = repoll_ms
        self._clock = clock or _wall_clock_ms
        self._metrics = metrics
        self._last_run_ms: Optional[int] = None

    @property
    def table_id(self) -> str:
        return self._table_id

    @property
    def last_run_ms(self) -> Optional[int]:
        """Clock value at the end of the last completed (or capped) balance pass."""
        return self._last_run_ms

    # -- helpers ----------------------------------------------------------

    def _increment(self, name: str, value: float = 1.0, **labels: str) -> None:
        if self._metrics and hasattr(self._metrics, "increment"):
            self._metrics.increment(name, value, table_id=self._table_id, **labels)

    def _observe(self, name: str, started: float) -> None:
        if self._metrics and hasattr(self._metrics, "observe_latency"):
            elapsed_ms = (time.monotonic() - started) * 1000
            self._metrics.observe_latency(name, elapsed_ms, table_id=self._table_id)

    def _group(self, tablets: Iterable[Tablet]) -> dict[str, list[Tablet]]:
        grouped: dict[str, list[Tablet]] = {}
        for tablet in tablets:
            grouped.setdefault(self._classify(tablet), []).append(tablet)
        return grouped

    def _desired_locations(
        self,
        group: str,
        tablets: list[Tablet],
        eligible: Sequence[Node],
        locations: Mapping[Tablet, Optional[Node]],
    ) -> dict[Tablet, Node]:
        """Goal counts over every tablet of the group, then stable assignment in tablet order."""
        ordered = sorted(tablets, key=lambda tablet: tablet.sort_key)
        goals = split(len(ordered), bucket_hosts(eligible), group)
        return assign(ordered, locations, goals)

    @staticmethod
    def _known_locations(
        locations: Mapping[Tablet, Optional[Node]],
        nodes: Collection[Node],
    ) -> dict[Tablet, Optional[Node]]:
        """Locations on nodes missing from the snapshot count as no location."""
        return {
            tablet: node if node is not None and node in nodes else None
            for tablet, node in locations.items()
        }

    def _enter(self) -> tuple:
        return table_id_ctx.set(self._table_id), pass_id_ctx.set(uuid.uuid4().hex)

    @staticmethod
    def _exit(tokens: tuple) -> None:
        table_token, pass_token = tokens
        pass_id_ctx.reset(pass_token)
        table_id_ctx.reset(table_token)

    # -- entry points -----------------------------------------------------

    def compute_assignments(
        self,
        nodes: Iterable[Node],
        unassigned: Mapping[Tablet, Optional[Node]],
        locations: Mapping[Tablet, Optional[Node]],
    ) -> dict[Tablet, Node]:
        """
        Destinations for the tablets in unassigned (tablet -> last location or None).
        locations is the full snapshot for the table; its tablets count against node
        budgets so already-placed tablets stay put. Groups without eligible nodes are
        left out of the result.
        """
        node_set = set(nodes)
        if not node_set or not unassigned:
            return {}

        tokens = self._enter()
        started = time.monotonic()
        try:
            known = self._known_locations(locations, node_set)
            known.update(self._known_locations(unassigned, node_set))

            requested = self._group(unassigned)
            in_requested_groups = {
                group: tablets
                for group, tablets in self._group(known).items()
                if group in requested
            }
            group_nodes = self._partitioner(sorted(node_set))

            out: dict[Tablet, Node] = {}
            for group in sorted(requested):
                eligible = group_nodes(group)
                if not eligible:
                    logger.debug("group_without_nodes", extra={"group": group})
                    self._increment("group_without_nodes", group=group)
                    continue
                desired = self._desired_locations(group, in_requested_groups[group], eligible, known)
                for tablet in requested[group]:
                    out[tablet] = desired[tablet]

            self._increment("tablets_assigned", float(len(out)))
            logger.info(
                "assignments_computed",
                extra={"requested": len(unassigned), "assigned": len(out), "groups": len(requested)},
            )
            return out
        finally:
            self._observe("assignment_latency", started)
            self._exit(tokens)

    def _skip_reason(self, node_set: Collection[Node], in_flight: Iterable[Tablet]) -> Optional[str]:
        if len(node_set) < 2:
            return "too_few_nodes"
        if any(tablet.table_id == self._table_id for tablet in in_flight):
            return "migration_in_flight"
        if self._last_run_ms is not None and self._clock() - self._last_run_ms < self._min_pass_interval_ms:
            return "cooldown"
        return None

    def balance(
        self,
        nodes: Iterable[Node],
        locations: Mapping[Tablet, Optional[Node]],
        in_flight: Iterable[Tablet] = (),
    ) -> BalanceResult:
        """
        Migrations that move located tablets to their desired nodes, at most
        max_migrations per pass. The cap is drained in group-name order, so an early
        group with many moves can use the whole budget. Tablets without a location are
        never migrated (compute_assignments places them).
        """
        node_set = set(nodes)
        reason = self._skip_reason(node_set, in_flight)
        if reason is not None:
            self._increment("balance_pass_skipped", reason=reason)
            logger.debug("balance_pass_skipped", extra={"table_id": self._table_id, "reason": reason})
            return BalanceResult(migrations=[], repoll_ms=self._repoll_ms)

        tokens = self._enter()
        started = time.monotonic()
        try:
            group_nodes = self._partitioner(sorted(node_set))
            max_migrations = self._max_migrations()
            known = self._known_locations(locations, node_set)
            grouped = self._group(known)

            migrations: list[Migration] = []
            capped = max_migrations <= 0
            for group in sorted(grouped):
                if capped:
                    break
                eligible = group_nodes(group)
                if not eligible:
                    self._increment("group_without_nodes", group=group)
                    continue
                desired = self._desired_locations(group, grouped[group], eligible, known)
                for tablet in sorted(grouped[group], key=lambda t: t.sort_key):
                    source = known[tablet]
                    destination = desired[tablet]
                    if source is None or source == destination:
                        continue
                    migrations.append(Migration(tablet=tablet, source=source, destination=destination))
                    if len(migrations) >= max_migrations:
                        capped = True
                        break

            self._last_run_ms = self._clock()
            self._increment("balance_pass_completed")
            self._increment("migrations_emitted", float(len(migrations)))
            if capped:
                self._increment("migration_cap_reached")
            logger.info(
                "balance_pass_completed",
                extra={
                    "groups": len(grouped),
                    "migrations": len(migrations),
                    "max_migrations": max_migrations,
                    "capped": capped,
                },
            )
            return BalanceResult(migrations=migrations, repoll_ms=self._repoll_ms)
        finally:
            self._observe("balance_pass_latency", started)
            self._exit(tokens)
