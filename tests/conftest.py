import os
import random

# settings are read on import, point them at throwaway values first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DB_CONNECT_DELAY"] = "0"

import pytest
from sqlalchemy.orm import sessionmaker

from authdesk.db_session import make_engine
from authdesk.identity import UserManager, RoleManager
from authdesk.init_db import initialize
from authdesk.update_db import apply_migrations


@pytest.fixture
def engine():
    """Fresh in-memory database per test"""
    eng = make_engine("sqlite://")
    yield eng
    eng.dispose()


@pytest.fixture
def migrated_engine(engine):
    apply_migrations(engine)
    return engine


@pytest.fixture
def db(migrated_engine):
    session = sessionmaker(bind=migrated_engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def user_manager(db):
    return UserManager(db, rounds=4)


@pytest.fixture
def role_manager(db):
    return RoleManager(db)


@pytest.fixture
def seeded_db(db, user_manager, role_manager):
    initialize(db, user_manager, role_manager, rng=random.Random(42))
    return db
