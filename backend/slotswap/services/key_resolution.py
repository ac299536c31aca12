"""
Key-resolution strategy for slots and slot requests.

Rows are looked up under the canonical partition first and, failing that,
under the legacy partition older deployments wrote. Callers get the row
they can write back to along with the scheme it was found under. Once all
legacy rows are migrated, LEGACY_KEY_FALLBACK can be switched off and this
module reduced to the canonical lookups.
"""

from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

from sqlmodel import Session

from slotswap import settings
from slotswap.models.game_slot import GameSlot
from slotswap.models.slot_request import SlotRequest
from slotswap.utils.table_keys import (
    SCHEME_CANONICAL,
    SCHEME_LEGACY,
    TableQuery,
    legacy_request_partition,
    legacy_slot_partition,
    request_partition,
    slot_partition,
)

T = TypeVar("T")


@dataclass
class Resolved(Generic[T]):
    row: T
    scheme: str  # SCHEME_CANONICAL | SCHEME_LEGACY

    @property
    def is_legacy(self) -> bool:
        return self.scheme == SCHEME_LEGACY


class KeyResolver:
    """Try canonical keys, then legacy keys."""

    def __init__(self, session: Session, legacy_fallback: Optional[bool] = None):
        self.session = session
        self.legacy_fallback = settings.LEGACY_KEY_FALLBACK if legacy_fallback is None else legacy_fallback

    def _slot_partitions(self, league_id: str, division: str) -> List[tuple]:
        partitions = [(slot_partition(league_id, division), SCHEME_CANONICAL)]
        if self.legacy_fallback:
            partitions.append((legacy_slot_partition(division), SCHEME_LEGACY))
        return partitions

    def _request_partitions(self, league_id: str, division: str, slot_id: str) -> List[tuple]:
        partitions = [(request_partition(league_id, division, slot_id), SCHEME_CANONICAL)]
        if self.legacy_fallback:
            partitions.append((legacy_request_partition(division, slot_id), SCHEME_LEGACY))
        return partitions

    def load_slot(self, league_id: str, division: str, slot_id: str) -> Optional[Resolved[GameSlot]]:
        for partition_key, scheme in self._slot_partitions(league_id, division):
            stmt = TableQuery(GameSlot).partition(partition_key).where_eq(GameSlot.slot_id, slot_id).statement()
            row = self.session.exec(stmt).first()
            if row is not None:
                return Resolved(row=row, scheme=scheme)
        return None

    def load_claim(
        self, league_id: str, division: str, slot_id: str, request_id: str
    ) -> Optional[Resolved[SlotRequest]]:
        for partition_key, scheme in self._request_partitions(league_id, division, slot_id):
            stmt = (
                TableQuery(SlotRequest)
                .partition(partition_key)
                .where_eq(SlotRequest.request_id, request_id)
                .statement()
            )
            row = self.session.exec(stmt).first()
            if row is not None:
                return Resolved(row=row, scheme=scheme)
        return None

    def list_claims(self, league_id: str, division: str, slot_id: str) -> List[SlotRequest]:
        """All claims for a slot under either scheme."""
        claims: List[SlotRequest] = []
        for partition_key, _scheme in self._request_partitions(league_id, division, slot_id):
            claims.extend(self.session.exec(TableQuery(SlotRequest).partition(partition_key).statement()).all())
        return claims
