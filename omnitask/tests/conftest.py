import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("TZ", "Europe/Zurich")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from omnitask import models  # noqa: F401  registers the tables
from omnitask.app import init_db
from omnitask.db import Base


@pytest.fixture(autouse=True, scope="session")
def create_schema():
    init_db()


@pytest.fixture
def session():
    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False, future=True)
    with SessionLocal() as session:
        yield session
    engine.dispose()
