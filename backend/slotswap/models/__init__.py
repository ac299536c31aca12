from slotswap.models.field import LeagueField
from slotswap.models.game_slot import GameSlot
from slotswap.models.membership import GlobalAdmin, LeagueMembership
from slotswap.models.slot_request import SlotRequest

__all__ = [
    "GameSlot",
    "SlotRequest",
    "LeagueField",
    "LeagueMembership",
    "GlobalAdmin",
]
