import os
from decimal import Decimal
from pathlib import Path

import pytest

from dancecomp.adapters.memory import InMemoryEngineStore
from dancecomp.adapters.sqlite.migrator import SQLiteMigrator
from dancecomp.adapters.sqlite.repos import SQLiteEngineStore
from dancecomp.domain.entities import EventRecord, FeeSchedule
from dancecomp.rules.loader import load_rules
from dancecomp.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def migrations_dir() -> str:
    # Real migrations, so the SQL itself is exercised
    return str(PROJECT_ROOT / "migrations")


@pytest.fixture
def rules() -> Rules:
    """Rules loaded from the real rules.yaml at the project root."""
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def schedule() -> FeeSchedule:
    return FeeSchedule(
        registration_fee_per_dancer=Decimal("300"),
        solo_1_fee=Decimal("400"),
        solo_2_fee=Decimal("750"),
        solo_3_fee=Decimal("1050"),
        solo_additional_fee=Decimal("100"),
        duo_trio_fee_per_dancer=Decimal("200"),
        group_fee_per_dancer=Decimal("150"),
        large_group_fee_per_dancer=Decimal("120"),
    )


@pytest.fixture
def event(schedule: FeeSchedule) -> EventRecord:
    return EventRecord(id="ev1", name="Regional Championships", fee_schedule=schedule)


@pytest.fixture
def memory_store(event: EventRecord) -> InMemoryEngineStore:
    store = InMemoryEngineStore()
    store.save_event(event)
    return store


@pytest.fixture
def db_path(tmp_path) -> str:
    return os.path.join(str(tmp_path), "dancecomp.db")


@pytest.fixture
def sqlite_store(db_path: str, migrations_dir: str, event: EventRecord) -> SQLiteEngineStore:
    SQLiteMigrator(db_path, migrations_dir).run_migrations()
    store = SQLiteEngineStore(db_path)
    store.save_event(event)
    return store
