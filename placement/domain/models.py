"""Placement domain models. Plain value objects; nothing here is persisted."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True, order=True)
class Node:
    """A tablet-serving process. Identity is (host, port)."""

    host: str
    port: int

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def __str__(self) -> str:
        return self.address


@dataclass(frozen=True)
class Tablet:
    """
    A contiguous row range of a table. end_row=None is the last tablet of the table,
    prev_end_row=None the first.
    """

    table_id: str
    end_row: Optional[str]
    prev_end_row: Optional[str] = None

    @property
    def sort_key(self) -> tuple:
        """Total order over tablets; None rows sort after every real row."""
        return (
            self.table_id,
            self.end_row is None,
            self.end_row or "",
            self.prev_end_row is None,
            self.prev_end_row or "",
        )

    def __str__(self) -> str:
        return f"{self.table_id};{self.end_row if self.end_row is not None else '<'}"


@dataclass(frozen=True)
class Migration:
    """Instruction to move one tablet off its current node."""

    tablet: Tablet
    source: Node
    destination: Node


@dataclass(frozen=True)
class BalanceResult:
    """Output of one balance call: migrations to run and when to call again."""

    migrations: List[Migration] = field(default_factory=list)
    repoll_ms: int = 5000


# Ephemeral per-group structures
HostBuckets = Dict[int, Dict[str, List[Node]]]
GoalCounts = Dict[Node, int]
