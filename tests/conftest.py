"""Pytest fixtures for crew management tests."""

import os
import sys
from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pytest

# in-memory app database; must be set before config is imported
os.environ["DATABASE_URL"] = "sqlite://"

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models as m
from database import Base, get_db, enable_sqlite_savepoints
from main import app


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(eng)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def seed(db):
    """Ranks, ports, vessels and five off-board crew members."""
    master = m.Rank(code="MSTR", name="Master")
    chief = m.Rank(code="C/O", name="Chief Officer")
    ab = m.Rank(code="AB", name="Able Seaman")

    ph = m.Country(code="PH", name="Philippines")
    sg = m.Country(code="SG", name="Singapore")
    manila = m.Port(code="MNL", name="Manila", country=ph)
    cebu = m.Port(code="CEB", name="Cebu", country=ph)
    singapore = m.Port(code="SIN", name="Singapore", country=sg)

    bulk = m.VesselType(code="BULK", name="Bulk Carrier")
    tanker = m.VesselType(code="TNK", name="Tanker")
    pacific = m.Vessel(code="V001", name="MV Pacific Star", vessel_type=bulk, principal="Oceanic Lines")
    luzon = m.Vessel(code="V002", name="MV Luzon Trader", vessel_type=bulk)
    retired = m.Vessel(code="V003", name="MV Old Glory", vessel_type=tanker, is_active=False)

    juan = m.CrewMember(crew_code="CR250001", first_name="Juan", last_name="Dela Cruz", rank=ab,
                        mobile_number="09171234567", email="juan@example.com")
    maria = m.CrewMember(crew_code="CR250002", first_name="Maria", last_name="Santos", rank=chief)
    pedro = m.CrewMember(crew_code="CR250003", first_name="Pedro", last_name="Juanito", rank=master)
    jose = m.CrewMember(crew_code="CR250004", first_name="Jose", last_name="Rizal", rank=None)
    ana = m.CrewMember(crew_code="CR250005", first_name="Ana", last_name="Reyes", rank=ab, is_active=False)

    basic = m.WageDescription(wage_code="BASIC", wage_name="Basic Wage", payable_on_board=True)
    fot = m.WageDescription(wage_code="FOT", wage_name="Fixed Overtime")

    db.add_all([
        master, chief, ab, ph, sg, manila, cebu, singapore, bulk, tanker,
        pacific, luzon, retired, juan, maria, pedro, jose, ana, basic, fot,
    ])
    db.commit()

    return SimpleNamespace(
        master=master, chief=chief, ab=ab,
        ph=ph, sg=sg, manila=manila, cebu=cebu, singapore=singapore,
        bulk=bulk, tanker=tanker,
        pacific=pacific, luzon=luzon, retired=retired,
        juan=juan, maria=maria, pedro=pedro, jose=jose, ana=ana,
        basic=basic, fot=fot,
    )


@pytest.fixture
def client(db, seed):
    """TestClient whose requests run on the test session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def on_board(db, seed):
    """Juan signed on MV Pacific Star at Manila on 2025-01-10."""
    from services.movement_service import join_crew

    return join_crew(
        db,
        crew_code=seed.juan.crew_code,
        vessel_id=seed.pacific.id,
        port_id=seed.manila.id,
        sign_on_date=date(2025, 1, 10),
    )
