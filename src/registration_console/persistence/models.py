"""SQLAlchemy models for the persistence layer."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRecord(Base):
    """Represents a registered user.

    Attributes:
        id: Server-assigned identifier (uuid4 string).
        seq: Autoincrement key assigned by the database, used for
            registration ordering.
        first_name: The user's first name.
        last_name: The user's last name.
        created_at: Timestamp when the user was registered.
        updated_at: Timestamp of the last update, if any.
    """

    __tablename__ = "users"

    seq: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    id: Mapped[str] = mapped_column(String(36), unique=True, index=True)
    first_name: Mapped[str] = mapped_column(String(255), default="")
    last_name: Mapped[str] = mapped_column(String(255), default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, onupdate=_utcnow
    )
