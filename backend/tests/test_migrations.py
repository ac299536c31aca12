import importlib.util
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect
from sqlmodel import SQLModel

from slotswap.database import init_db

VERSIONS_DIR = Path(__file__).resolve().parent.parent / "alembic" / "versions"


def _load_revision(filename: str):
    spec = importlib.util.spec_from_file_location(filename[:-3], VERSIONS_DIR / filename)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _run(engine, fn):
    with engine.begin() as connection:
        context = MigrationContext.configure(connection)
        with Operations.context(context):
            fn()


def test_initial_revision_matches_models():
    revision = _load_revision("001_initial_slot_tables.py")
    assert revision.down_revision is None

    engine = create_engine("sqlite://")
    _run(engine, revision.upgrade)

    inspector = inspect(engine)
    expected = {name: {c.name for c in table.columns} for name, table in SQLModel.metadata.tables.items()}
    assert set(inspector.get_table_names()) == set(expected)
    for table_name, columns in expected.items():
        assert {c["name"] for c in inspector.get_columns(table_name)} == columns

    uniques = {tuple(u["column_names"]) for u in inspector.get_unique_constraints("gameslot")}
    assert ("partition_key", "slot_id") in uniques


def test_initial_revision_downgrades_cleanly():
    revision = _load_revision("001_initial_slot_tables.py")
    engine = create_engine("sqlite://")
    _run(engine, revision.upgrade)
    _run(engine, revision.downgrade)
    assert inspect(engine).get_table_names() == []


def test_init_db_targets_the_given_engine():
    engine = create_engine("sqlite://")
    init_db(engine)
    assert set(inspect(engine).get_table_names()) == set(SQLModel.metadata.tables)
