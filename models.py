import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, Index, String, Uuid

from database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    User account record.

    A record counts as deleted only when both ``deleted_at`` and
    ``deleted_by`` are set. Usernames are unique among live records.
    """

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(128), nullable=False)
    name = Column(String(256), nullable=False, default="")
    password_hash = Column("password", String(256), nullable=False)
    role = Column(String(64), nullable=False, default="")
    created_at = Column("createdAt", DateTime(timezone=True), nullable=False, default=utcnow)
    created_by = Column("createdBy", Uuid, nullable=False)
    updated_at = Column("updatedAt", DateTime(timezone=True), nullable=True)
    updated_by = Column("updatedBy", Uuid, nullable=True)
    deleted_at = Column("deletedAt", DateTime(timezone=True), nullable=True)
    deleted_by = Column("deletedBy", Uuid, nullable=True)

    __table_args__ = (
        Index(
            "uq_users_username_live",
            "username",
            unique=True,
            sqlite_where=deleted_at.is_(None),
            postgresql_where=deleted_at.is_(None),
        ),
    )

    # Not persisted; filled in when a token is issued for this user.
    access_token = ""

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None and self.deleted_by is not None

    def soft_delete(self, actor_id: uuid.UUID, when: Optional[datetime] = None) -> None:
        """Mark the record deleted by ``actor_id``. Both fields are set together."""
        self.deleted_at = when or utcnow()
        self.deleted_by = actor_id

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"
