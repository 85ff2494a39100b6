"""SQLAlchemy implementation of the UsersApi."""

import uuid

from sqlalchemy import or_, select

from registration_console.api.base import UsersApi, normalize_term
from registration_console.api.errors import UserNotFoundError
from registration_console.models.user import CreateUserInput, User, UserPatch
from registration_console.observability.logging import get_logger
from registration_console.persistence.db import (
    make_engine,
    make_session_factory,
)
from registration_console.persistence.models import Base, UserRecord

logger = get_logger(__name__)


def _escape_like(term: str) -> str:
    return (
        term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )


def _to_user(row: UserRecord) -> User:
    return User(id=row.id, first_name=row.first_name, last_name=row.last_name)


class SQLUsersApi(UsersApi):
    """Users backend stored in a relational database."""

    def __init__(self, database_url: str):
        """Initialize the repository with a database URL.

        Args:
            database_url: SQLAlchemy connection string.
        """
        self.engine = make_engine(database_url)
        Base.metadata.create_all(self.engine)
        self.SessionLocal = make_session_factory(self.engine)

    def check_health(self) -> bool:
        try:
            with self.SessionLocal() as session:
                session.execute(select(1))
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {str(e)}")
            return False

    @staticmethod
    def _find(session, user_id: str) -> UserRecord | None:
        return session.execute(
            select(UserRecord).where(UserRecord.id == user_id)
        ).scalar_one_or_none()

    def get_users(self) -> list[User]:
        with self.SessionLocal() as session:
            rows = session.execute(
                select(UserRecord).order_by(UserRecord.seq)
            ).scalars()
            return [_to_user(row) for row in rows]

    def search_user(self, term: str) -> list[User]:
        needle = normalize_term(term)
        if not needle:
            return self.get_users()

        pattern = f"%{_escape_like(needle)}%"
        full_name = UserRecord.first_name + " " + UserRecord.last_name
        stmt = (
            select(UserRecord)
            .where(
                or_(
                    UserRecord.first_name.ilike(pattern, escape="\\"),
                    UserRecord.last_name.ilike(pattern, escape="\\"),
                    full_name.ilike(pattern, escape="\\"),
                )
            )
            .order_by(UserRecord.seq)
        )
        with self.SessionLocal() as session:
            return [_to_user(row) for row in session.execute(stmt).scalars()]

    def create_user(self, data: CreateUserInput) -> User:
        with self.SessionLocal() as session:
            row = UserRecord(
                id=str(uuid.uuid4()),
                first_name=data.first_name,
                last_name=data.last_name,
            )
            session.add(row)
            session.commit()
            user = _to_user(row)

        logger.info(
            "User created",
            extra={"extra_fields": {"event": "user_created", "user_id": user.id}},
        )
        return user

    def update_user(self, user_id: str, patch: UserPatch) -> User:
        with self.SessionLocal() as session:
            row = self._find(session, user_id)
            if row is None:
                raise UserNotFoundError(user_id)
            for attr, value in patch.changes().items():
                setattr(row, attr, value)
            session.commit()
            user = _to_user(row)

        logger.info(
            "User updated",
            extra={"extra_fields": {"event": "user_updated", "user_id": user_id}},
        )
        return user

    def delete_user(self, user_id: str) -> None:
        with self.SessionLocal() as session:
            row = self._find(session, user_id)
            if row is None:
                raise UserNotFoundError(user_id)
            session.delete(row)
            session.commit()

        logger.info(
            "User deleted",
            extra={"extra_fields": {"event": "user_deleted", "user_id": user_id}},
        )
