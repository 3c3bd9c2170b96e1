from __future__ import annotations

from pathlib import Path

import pytest

import soft_delete_user
from auth import PasswordHasher
from config import Settings
from database import init_db, make_engine, make_session_factory
from errors import NotFound
from repository import UserRepository
from schemas import LoginRequest, UserRequest
from service import AccountService
from tokens import TokenIssuer


@pytest.fixture()
def file_settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'accounts.db'}",
        jwt_secret="tests-secret-key",
        password_hash_rounds=1000,
    )


def _service(settings: Settings):
    engine = make_engine(settings.database_url)
    init_db(engine)
    db = make_session_factory(engine)()
    service = AccountService(UserRepository(db), PasswordHasher(1000), TokenIssuer(settings.jwt_secret))
    return engine, db, service


def test_soft_delete_by_username(file_settings: Settings, capsys) -> None:
    engine, db, service = _service(file_settings)
    try:
        service.register(UserRequest(username="alice", name="Alice", password="secret123", role="user"))
        admin = service.register(UserRequest(username="root", name="Root", password="pw", role="admin"))
        admin_id = admin.id
    finally:
        db.close()

    assert soft_delete_user.main(["alice", "--by", "root"], settings=file_settings) == 0
    assert "Deleted user alice" in capsys.readouterr().out

    db = make_session_factory(engine)()
    try:
        service = AccountService(UserRepository(db), PasswordHasher(1000), TokenIssuer(file_settings.jwt_secret))
        stored = service.repository.resolve_by_username("alice")
        assert stored.is_deleted
        assert stored.deleted_by == admin_id
        with pytest.raises(NotFound):
            service.login(LoginRequest(username="alice", password="secret123"))
    finally:
        db.close()
        engine.dispose()


def test_soft_delete_defaults_to_self(file_settings: Settings) -> None:
    engine, db, service = _service(file_settings)
    try:
        user = service.register(UserRequest(username="alice", name="Alice", password="secret123", role="user"))
        deleted = soft_delete_user.soft_delete(service.repository, "alice")
        assert deleted.deleted_by == user.id
        assert deleted.is_deleted
    finally:
        db.close()
        engine.dispose()


def test_soft_delete_unknown_or_deleted_user_fails(file_settings: Settings, capsys) -> None:
    assert soft_delete_user.main(["ghost"], settings=file_settings) == 1
    assert "User not found" in capsys.readouterr().err

    engine, db, service = _service(file_settings)
    try:
        service.register(UserRequest(username="alice", name="Alice", password="secret123", role="user"))
    finally:
        db.close()
        engine.dispose()

    assert soft_delete_user.main(["alice"], settings=file_settings) == 0
    assert soft_delete_user.main(["alice"], settings=file_settings) == 1
    assert "already deleted" in capsys.readouterr().err


def test_deleted_admin_cannot_delete_users(file_settings: Settings, capsys) -> None:
    engine, db, service = _service(file_settings)
    try:
        service.register(UserRequest(username="alice", name="Alice", password="secret123", role="user"))
        service.register(UserRequest(username="root", name="Root", password="pw", role="admin"))
        soft_delete_user.soft_delete(service.repository, "root")
    finally:
        db.close()

    assert soft_delete_user.main(["alice", "--by", "root"], settings=file_settings) == 1
    assert "User not found" in capsys.readouterr().err

    db = make_session_factory(engine)()
    try:
        assert not UserRepository(db).resolve_by_username("alice").is_deleted
    finally:
        db.close()
        engine.dispose()
