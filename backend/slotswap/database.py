from pathlib import Path
from typing import Generator, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from slotswap import settings

DATABASE_URL = settings.DATABASE_URL

_is_sqlite = DATABASE_URL.startswith("sqlite")
_connect_args = {"check_same_thread": False} if _is_sqlite else {}

if _is_sqlite and ":memory:" not in DATABASE_URL:
    db_path = DATABASE_URL.replace("sqlite:///", "", 1)
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

engine: Engine = create_engine(
    DATABASE_URL,
    echo=settings.SQL_ECHO,
    connect_args=_connect_args,
)


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with Session(engine) as session:
        yield session


def init_db(bind: Optional[Engine] = None) -> None:
    """Initialize database - create all tables"""
    # Import all models to ensure they're registered with SQLModel metadata
    from slotswap.models.field import LeagueField  # noqa: F401
    from slotswap.models.game_slot import GameSlot  # noqa: F401
    from slotswap.models.membership import GlobalAdmin, LeagueMembership  # noqa: F401
    from slotswap.models.slot_request import SlotRequest  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)
