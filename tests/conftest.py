from __future__ import annotations

import sys
from datetime import timedelta
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app import create_app
from auth import PasswordHasher
from config import Settings
from database import init_db, make_engine, make_session_factory
from repository import UserRepository
from service import AccountService
from tokens import TokenIssuer

SECRET = "tests-secret-key"
FAST_ROUNDS = 1000


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        jwt_secret=SECRET,
        password_hash_rounds=FAST_ROUNDS,
    )


@pytest.fixture()
def db() -> Iterator[Session]:
    engine = make_engine("sqlite://")
    init_db(engine)
    session = make_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def hasher() -> PasswordHasher:
    return PasswordHasher(FAST_ROUNDS)


@pytest.fixture()
def tokens() -> TokenIssuer:
    return TokenIssuer(SECRET, ttl=timedelta(hours=1))


@pytest.fixture()
def repository(db: Session) -> UserRepository:
    return UserRepository(db)


@pytest.fixture()
def service(repository: UserRepository, hasher: PasswordHasher, tokens: TokenIssuer) -> AccountService:
    return AccountService(repository, hasher, tokens)


@pytest.fixture()
def client(settings: Settings) -> Iterator[TestClient]:
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
    app.state.engine.dispose()
