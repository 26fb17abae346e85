"""MongoDB implementation of UserRepository."""

import uuid
from datetime import datetime, timezone
from logging import getLogger

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from adapter.mongodb.connection import USERS_COLLECTION_NAME
from domain.model.errors import DuplicateError
from domain.model.user import NewUser, Role, User

logger = getLogger(__name__)


class MongoUserRepository:
    def __init__(self, db: Database, client=None):
        self.collection = db[USERS_COLLECTION_NAME]
        self.client = client

    def ensure_schema(self) -> None:
        """Create the unique indexes that enforce username/email uniqueness."""
        self.collection.create_index([('email', 1)], name='idx_users_email', unique=True)
        self.collection.create_index([('username', 1)], name='idx_users_username', unique=True)
        self.collection.create_index([('created_at', -1)], name='idx_users_created_at')
        logger.info("Users indexes verified/created")

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=doc['_id'],
            username=doc['username'],
            email=doc['email'],
            password_hash=doc['password_hash'],
            first_name=doc.get('first_name'),
            last_name=doc.get('last_name'),
            role=Role(doc.get('role', Role.USER.value)),
            is_active=doc.get('is_active', True),
            last_login=doc.get('last_login'),
            created_at=doc['created_at'],
            updated_at=doc['updated_at'],
        )

    # ── write operations ─────────────────────────────────────

    def create(self, new_user: NewUser) -> User:
        """Insert a user document. The unique indexes decide duplicates."""
        now = datetime.now(timezone.utc)
        user_doc = {
            '_id': uuid.uuid4().hex,
            'username': new_user.username,
            'email': new_user.email,
            'password_hash': new_user.password_hash,
            'first_name': new_user.first_name,
            'last_name': new_user.last_name,
            'role': new_user.role.value,
            'is_active': True,
            'last_login': None,
            'created_at': now,
            'updated_at': now,
        }
        try:
            self.collection.insert_one(user_doc)
        except DuplicateKeyError as e:
            logger.warning(
                "User creation failed: unique index violated",
                extra={"username": new_user.username, "email": new_user.email},
            )
            raise DuplicateError("Username or email already registered") from e

        logger.info("User created", extra={"userId": user_doc['_id'], "email": new_user.email})
        return self._to_domain(user_doc)

    def update_password(self, user_id: str, password_hash: str) -> User | None:
        doc = self.collection.find_one_and_update(
            {'_id': user_id},
            {'$set': {'password_hash': password_hash, 'updated_at': datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            return None

        logger.info("Password updated", extra={"userId": user_id})
        return self._to_domain(doc)

    # ── read operations ──────────────────────────────────────

    def _find_one(self, query: dict) -> User | None:
        doc = self.collection.find_one(query)
        return self._to_domain(doc) if doc else None

    def get_by_id(self, user_id: str) -> User | None:
        return self._find_one({'_id': user_id})

    def get_by_email(self, email: str) -> User | None:
        return self._find_one({'email': email})

    def get_by_username(self, username: str) -> User | None:
        return self._find_one({'username': username})

    # ── lifecycle ────────────────────────────────────────────

    def ping(self) -> bool:
        if self.client is None:
            return False
        try:
            self.client.admin.command('ping')
            return True
        except PyMongoError as e:
            logger.error("MongoDB ping failed", extra={"error": str(e)[:200]})
            return False

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
