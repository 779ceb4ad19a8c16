from sqlalchemy import String, DateTime, Boolean, UUID, Index, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from datetime import datetime
from userstore.database.base import Base
import uuid


class UserRecord(Base):
    """
    SQLAlchemy model for the `users` table.

    Row-shaped mirror of the domain `User`. Timestamps are owned by the
    database once the row exists. `deleted_at` is only written when the
    repository runs in soft-delete mode; rows with a value there are not live.
    """
    __tablename__ = "users"

    # Email is unique among live rows only, so a soft-deleted user frees it
    __table_args__ = (
        Index(
            "uq_users_email_live",
            "email",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    # Primary key, generated client-side unless the caller supplies one
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # Display name
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )

    # Hashed password (never store plain-text passwords)
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False
    )

    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # Advanced by the database on every UPDATE issued through the ORM
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True
    )

    def __repr__(self) -> str:
        return f"<UserRecord(id={self.id!r}, email={self.email!r}, role={self.role!r})>"
