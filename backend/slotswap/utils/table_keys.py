"""
Partition-key schemes and a small typed query builder for keyed tables.

Slots and slot requests are addressed by (partition_key, row key). Rows
written by the current code use the canonical scheme; older rows may still
sit under the legacy scheme. Queries over keys go through TableQuery so
every value is a bound parameter, never spliced into a filter string.
"""

from typing import Any, List, Optional

from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import select

SCHEME_CANONICAL = "canonical"
SCHEME_LEGACY = "legacy"

# Upper bound for prefix ranges: [prefix, prefix + MAX_CHAR)
PREFIX_RANGE_END = "\uffff"


def slot_partition(league_id: str, division: str) -> str:
    return f"SLOT#{league_id}#{division}"


def slot_partition_prefix(league_id: str) -> str:
    """All slot partitions in a league, across divisions"""
    return f"SLOT#{league_id}#"


def legacy_slot_partition(division: str) -> str:
    return division


def request_partition(league_id: str, division: str, slot_id: str) -> str:
    return f"SLOTREQ#{league_id}#{division}#{slot_id}"


def legacy_request_partition(division: str, slot_id: str) -> str:
    return f"{division}|{slot_id}"


def division_from_partition(partition_key: str, league_id: str) -> str:
    prefix = slot_partition_prefix(league_id)
    if not partition_key.lower().startswith(prefix.lower()):
        return ""
    return partition_key[len(prefix):]


class TableQuery:
    """
    Build a SELECT over a keyed SQLModel table.

    Example:
        TableQuery(GameSlot).partition_prefix("SLOT#L1#").where_eq(GameSlot.status, "Confirmed").statement()
    """

    def __init__(self, model: Any):
        self.model = model
        self._clauses: List[ColumnElement] = []

    def partition(self, partition_key: str) -> "TableQuery":
        self._clauses.append(self.model.partition_key == partition_key)
        return self

    def partition_prefix(self, prefix: str) -> "TableQuery":
        self._clauses.append(self.model.partition_key >= prefix)
        self._clauses.append(self.model.partition_key < prefix + PREFIX_RANGE_END)
        return self

    def where_eq(self, column: Any, value: Any) -> "TableQuery":
        self._clauses.append(column == value)
        return self

    def where_range(self, column: Any, ge: Optional[Any] = None, le: Optional[Any] = None) -> "TableQuery":
        """Inclusive bounds; a None bound is left open."""
        if ge is not None:
            self._clauses.append(column >= ge)
        if le is not None:
            self._clauses.append(column <= le)
        return self

    def statement(self):
        stmt = select(self.model)
        if self._clauses:
            stmt = stmt.where(*self._clauses)
        return stmt
