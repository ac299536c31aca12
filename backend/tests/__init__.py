import os

# Keep the app's own engine off disk; tests use the StaticPool engine in conftest
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

# Force SQLModel table registration at test discovery time
from slotswap.models.field import LeagueField  # noqa: E402,F401
from slotswap.models.game_slot import GameSlot  # noqa: E402,F401
from slotswap.models.membership import GlobalAdmin, LeagueMembership  # noqa: E402,F401
from slotswap.models.slot_request import SlotRequest  # noqa: E402,F401
