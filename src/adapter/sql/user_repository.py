"""SQLAlchemy implementation of UserRepository."""

import uuid
from datetime import datetime, timezone
from logging import getLogger

from sqlalchemy import select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from adapter.sql.models import Base, UserRecord
from domain.model.errors import DuplicateError
from domain.model.user import NewUser, User

logger = getLogger(__name__)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlUserRepository:
    def __init__(self, engine: Engine):
        self.engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)

    def ensure_schema(self) -> None:
        """Create the users table if it does not exist."""
        Base.metadata.create_all(self.engine)
        logger.info("Users table verified/created")

    def _to_domain(self, record: UserRecord) -> User:
        """Convert an ORM row to the User domain model."""
        return User(
            id=record.id,
            username=record.username,
            email=record.email,
            password_hash=record.password_hash,
            first_name=record.first_name,
            last_name=record.last_name,
            role=record.role,
            is_active=record.is_active,
            last_login=_as_utc(record.last_login),
            created_at=_as_utc(record.created_at),
            updated_at=_as_utc(record.updated_at),
        )

    def _find_one(self, session: Session, **criteria) -> UserRecord | None:
        return session.execute(select(UserRecord).filter_by(**criteria)).scalar_one_or_none()

    # ── write operations ─────────────────────────────────────

    def create(self, new_user: NewUser) -> User:
        """Insert a user row. The unique constraints decide duplicates."""
        now = datetime.now(timezone.utc)
        record = UserRecord(
            id=uuid.uuid4().hex,
            username=new_user.username,
            email=new_user.email,
            password_hash=new_user.password_hash,
            first_name=new_user.first_name,
            last_name=new_user.last_name,
            role=new_user.role,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        with self._sessions() as session:
            session.add(record)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                logger.warning(
                    "User creation failed: unique constraint violated",
                    extra={"username": new_user.username, "email": new_user.email},
                )
                raise DuplicateError("Username or email already registered") from e

            logger.info("User created", extra={"userId": record.id, "email": record.email})
            return self._to_domain(record)

    def update_password(self, user_id: str, password_hash: str) -> User | None:
        with self._sessions() as session:
            record = session.get(UserRecord, user_id)
            if record is None:
                return None

            record.password_hash = password_hash
            record.updated_at = datetime.now(timezone.utc)
            session.commit()
            logger.info("Password updated", extra={"userId": user_id})
            return self._to_domain(record)

    # ── read operations ──────────────────────────────────────

    def get_by_id(self, user_id: str) -> User | None:
        with self._sessions() as session:
            record = session.get(UserRecord, user_id)
            return self._to_domain(record) if record else None

    def get_by_email(self, email: str) -> User | None:
        with self._sessions() as session:
            record = self._find_one(session, email=email)
            return self._to_domain(record) if record else None

    def get_by_username(self, username: str) -> User | None:
        with self._sessions() as session:
            record = self._find_one(session, username=username)
            return self._to_domain(record) if record else None

    # ── lifecycle ────────────────────────────────────────────

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error("Database ping failed", extra={"error": str(e)[:200]})
            return False

    def close(self) -> None:
        self.engine.dispose()
