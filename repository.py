import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from database import transaction
from errors import Conflict, InternalError, NotFound
from models import User

logger = logging.getLogger(__name__)


class UserRepository:
    """
    Persistence for user records.

    Duplicate ids and duplicate live usernames are rejected by the table's
    constraints; the resulting integrity error is reported as ``Conflict``.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, user: User) -> None:
        try:
            with transaction(self.db):
                self.db.add(user)
                self.db.flush()
        except IntegrityError as exc:
            logger.warning("Create user %s rejected: %s", user.id, exc.orig)
            raise Conflict("create", "User", "already exists") from exc
        except SQLAlchemyError as exc:
            logger.exception("Create user %s failed", user.id)
            raise InternalError("Failed to create user") from exc

    def update(self, user: User) -> None:
        if not self.exists_by_id(user.id):
            logger.warning("Update user %s rejected: no such user", user.id)
            raise NotFound("User")

        values = {
            "username": user.username,
            "name": user.name,
            "password_hash": user.password_hash,
            "role": user.role,
            "created_at": user.created_at,
            "created_by": user.created_by,
            "updated_at": user.updated_at,
            "updated_by": user.updated_by,
            "deleted_at": user.deleted_at,
            "deleted_by": user.deleted_by,
        }
        try:
            with transaction(self.db):
                stored = self.db.get(User, user.id)
                for key, value in values.items():
                    setattr(stored, key, value)
                self.db.flush()
        except IntegrityError as exc:
            logger.warning("Update user %s rejected: %s", user.id, exc.orig)
            raise Conflict("update", "User", "username already taken") from exc
        except SQLAlchemyError as exc:
            logger.exception("Update user %s failed", user.id)
            raise InternalError("Failed to update user") from exc

    def exists_by_id(self, user_id: uuid.UUID) -> bool:
        try:
            count = self.db.scalar(select(func.count(User.id)).where(User.id == user_id))
        except SQLAlchemyError as exc:
            logger.exception("Existence check for user %s failed", user_id)
            raise InternalError("Failed to look up user") from exc
        return bool(count)

    def resolve_by_username(self, username: str) -> User:
        """
        Return the record with ``username``. Soft-deleted records are
        returned too; a live record takes precedence over deleted ones.
        """
        stmt = (
            select(User)
            .where(User.username == username)
            .order_by(User.deleted_at.is_not(None), User.created_at.desc())
            .limit(1)
        )
        try:
            user = self.db.scalars(stmt).first()
        except SQLAlchemyError as exc:
            logger.exception("Lookup of user %r failed", username)
            raise InternalError("Failed to look up user") from exc

        if user is None:
            logger.info("User %r not found", username)
            raise NotFound("User")
        return user
