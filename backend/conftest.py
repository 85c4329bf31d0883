from __future__ import annotations

import os
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["DATABASE_WRITE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SCHEMA_AUTO_CREATE"] = "0"
os.environ.setdefault("SCHEDULE_TIMEZONE", "Asia/Kolkata")

from cranedb.database import Base  # noqa: E402
from cranedb.apps.plant import models as plant_models  # noqa: E402
from cranedb.apps.maintenance_schedule import models as schedule_models  # noqa: E402


def make_engine():
    # StaticPool keeps one connection so every session (and TestClient
    # thread) sees the same in-memory database.
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(
        bind=engine,
        tables=[
            plant_models.Department.__table__,
            plant_models.Shed.__table__,
            plant_models.Crane.__table__,
            schedule_models.MaintenanceTracking.__table__,
        ],
    )
    return engine


@pytest.fixture()
def db_engine():
    engine = make_engine()
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(db_engine):
    return sessionmaker(
        bind=db_engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def add_crane(db, shed, crane_number, *, is_active=True):
    crane = plant_models.Crane(shed_id=shed.id, crane_number=crane_number, is_active=is_active)
    db.add(crane)
    db.flush()
    return crane


@pytest.fixture()
def plant(db_session):
    """
    Small plant:
      HSM  : Shed A (HSM-01, HSM-02), Shed B (HSM-03)
      HBM  : Bay 1 (HBM-01, HBM-02)
      PTM  : Line 1 (PTM-01)
      FAB  : Workshop (FAB-01), no maintenance window
      plus one retired HBM crane.
    """
    db = db_session
    departments = {}
    for order, (code, name) in enumerate(
        [
            ("HSM", "Hot Strip Mill"),
            ("HBM", "Hot Bar Mill"),
            ("PTM", "Pipe & Tube Mill"),
            ("FAB", "Fabrication"),
        ]
    ):
        department = plant_models.Department(code=code, name=name, sort_order=order)
        db.add(department)
        departments[code] = department
    db.flush()

    sheds = {}
    for key, code, name in [
        ("hsm_a", "HSM", "Shed A"),
        ("hsm_b", "HSM", "Shed B"),
        ("hbm_1", "HBM", "Bay 1"),
        ("ptm_1", "PTM", "Line 1"),
        ("fab", "FAB", "Workshop"),
    ]:
        shed = plant_models.Shed(department_id=departments[code].id, name=name)
        db.add(shed)
        sheds[key] = shed
    db.flush()

    cranes = SimpleNamespace(
        hsm_1=add_crane(db, sheds["hsm_a"], "HSM-01"),
        hsm_2=add_crane(db, sheds["hsm_a"], "HSM-02"),
        hsm_3=add_crane(db, sheds["hsm_b"], "HSM-03"),
        hbm_1=add_crane(db, sheds["hbm_1"], "HBM-01"),
        hbm_2=add_crane(db, sheds["hbm_1"], "HBM-02"),
        ptm_1=add_crane(db, sheds["ptm_1"], "PTM-01"),
        fab_1=add_crane(db, sheds["fab"], "FAB-01"),
        hbm_retired=add_crane(db, sheds["hbm_1"], "HBM-99", is_active=False),
    )
    db.commit()
    return SimpleNamespace(departments=departments, sheds=sheds, cranes=cranes)
