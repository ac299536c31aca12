from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from slotswap.database import get_session, init_db
from slotswap.main import app
from slotswap.models.field import LeagueField
from slotswap.models.game_slot import SLOT_CONFIRMED, SLOT_OPEN, GameSlot
from slotswap.models.membership import ROLE_COACH, ROLE_LEAGUE_ADMIN, ROLE_VIEWER, GlobalAdmin, LeagueMembership
from slotswap.models.slot_request import REQUEST_PENDING, SlotRequest
from slotswap.utils.caller import load_caller
from slotswap.utils.table_keys import legacy_request_partition, legacy_slot_partition, request_partition, slot_partition

TEST_DATABASE_URL = "sqlite:///:memory:"
LEAGUE = "L1"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. Tables dropped and recreated per test (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema"""
    SQLModel.metadata.drop_all(test_engine)
    init_db(test_engine)

    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place
    for the entire duration.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# League fixtures
# ============================================================================
# Users:
#   admin          LeagueAdmin
#   root           global admin, no membership
#   coach-a..d     Coach, division 10U, teams A..D
#   coach-a12      Coach, division 12U, team A12
#   coach-x        Coach, no team assignment
#   viewer         Viewer
#   outsider       no membership
COACHES = {
    "coach-a": ("10U", "A"),
    "coach-b": ("10U", "B"),
    "coach-c": ("10U", "C"),
    "coach-d": ("10U", "D"),
    "coach-a12": ("12U", "A12"),
}


@pytest.fixture
def league(session: Session):
    """Seed the field directory and membership list for LEAGUE"""
    session.add(
        LeagueField(
            league_id=LEAGUE, park_code="central", field_code="f1", park_name="Central Park", field_name="Field 1"
        )
    )
    session.add(
        LeagueField(
            league_id=LEAGUE,
            park_code="central",
            field_code="f2",
            park_name="Central Park",
            field_name="Field 2",
            display_name="Central #2",
        )
    )
    session.add(
        LeagueField(
            league_id=LEAGUE,
            park_code="river",
            field_code="f9",
            park_name="Riverside",
            field_name="Field 9",
            is_active=False,
        )
    )
    session.add(LeagueMembership(user_id="admin", league_id=LEAGUE, role=ROLE_LEAGUE_ADMIN))
    for user_id, (division, team_id) in COACHES.items():
        session.add(
            LeagueMembership(user_id=user_id, league_id=LEAGUE, role=ROLE_COACH, division=division, team_id=team_id)
        )
    session.add(LeagueMembership(user_id="coach-x", league_id=LEAGUE, role=ROLE_COACH))
    session.add(LeagueMembership(user_id="viewer", league_id=LEAGUE, role=ROLE_VIEWER))
    session.add(GlobalAdmin(user_id="root"))
    session.commit()
    return LEAGUE


@pytest.fixture
def caller_for(session: Session, league):
    """Build the Caller for a seeded user"""

    def _caller(user_id: str, league_id: str = LEAGUE):
        return load_caller(session, user_id, league_id, f"{user_id}@example.com")

    return _caller


def auth(user_id: str, league_id: str = LEAGUE) -> dict:
    """Identity headers an upstream auth proxy would set"""
    return {"x-league-id": league_id, "x-user-id": user_id, "x-user-email": f"{user_id}@example.com"}


@pytest.fixture
def headers():
    return auth


@pytest.fixture
def make_slot(session: Session, league):
    """Insert a slot row directly, bypassing create validation (imports, legacy rows)"""

    def _make_slot(
        division: str = "10U",
        offering_team_id: str = "A",
        game_date: str = "2026-04-10",
        start_time: str = "18:00",
        end_time: str = "20:00",
        status: str = SLOT_OPEN,
        confirmed_team_id=None,
        legacy: bool = False,
        league_id: str = LEAGUE,
    ) -> GameSlot:
        slot_id = uuid4().hex
        slot = GameSlot(
            partition_key=legacy_slot_partition(division) if legacy else slot_partition(league_id, division),
            slot_id=slot_id,
            league_id="" if legacy else league_id,
            division=division,
            offering_team_id=offering_team_id,
            game_date=game_date,
            start_time=start_time,
            end_time=end_time,
            field_key="central/f1",
            park_name="Central Park",
            field_name="Field 1",
            display_name="Central Park > Field 1",
            status=status,
            confirmed_team_id=confirmed_team_id,
            confirmed_request_id=uuid4().hex if status == SLOT_CONFIRMED else None,
        )
        session.add(slot)
        session.commit()
        session.refresh(slot)
        return slot

    return _make_slot


@pytest.fixture
def make_pending_claim(session: Session):
    """Insert a Pending claim as the legacy request flow wrote them"""

    def _make_claim(slot: GameSlot, team_id: str, legacy: bool = False, league_id: str = LEAGUE) -> SlotRequest:
        claim = SlotRequest(
            partition_key=(
                legacy_request_partition(slot.division, slot.slot_id)
                if legacy
                else request_partition(league_id, slot.division, slot.slot_id)
            ),
            request_id=uuid4().hex,
            league_id="" if legacy else league_id,
            division=slot.division,
            slot_id=slot.slot_id,
            requesting_team_id=team_id,
            requesting_email=f"{team_id.lower()}@example.com",
            status=REQUEST_PENDING,
        )
        session.add(claim)
        session.commit()
        session.refresh(claim)
        return claim

    return _make_claim
