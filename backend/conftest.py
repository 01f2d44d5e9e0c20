from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["ACCESS_TOKEN_SECRET"] = "test-access-secret"
os.environ["REFRESH_TOKEN_SECRET"] = "test-refresh-secret"
# Cheap Argon2 parameters keep the suite fast.
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "1024"
os.environ["ARGON2_PARALLELISM"] = "1"

from inventorydb.database import Base  # noqa: E402
from inventorydb.apps.accounts import models as account_models  # noqa: E402
from inventorydb.apps.accounts import services as account_services  # noqa: E402
from inventorydb.apps.catalog import models as catalog_models  # noqa: E402, F401
from inventorydb.apps.inventory import models as inventory_models  # noqa: E402, F401


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_user(db_session):
    def _make_user(
        username: str,
        role: account_models.PermissionRole = account_models.PermissionRole.VIEWER,
        password: str = "correct-horse-battery",
    ) -> account_models.User:
        user = account_services.create_user(
            db_session,
            username=username,
            password=password,
            permission_role=role,
        )
        db_session.commit()
        return user

    return _make_user
