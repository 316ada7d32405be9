"""MongoDB implementation of UserRepository."""

import uuid
from datetime import datetime, timezone
from logging import getLogger
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError
from adapter.mongodb.connection import USERS_COLLECTION_NAME
from domain.model.errors import ConflictError
from domain.model.user import User, UserRole

logger = getLogger(__name__)

# Projection for ordinary reads: the hash is only selected on demand
_WITHOUT_HASH = {'password_hash': 0}

_RESET_FIELDS = ('password_reset_token', 'password_reset_expires')


class MongoUserRepository:
    def __init__(self, db: Database):
        self.collection = db[USERS_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        """Create indexes for users collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(self.collection, [('email', 1)], 'idx_users_email', unique=True)
            create_index_safe(
                self.collection, [('password_reset_token', 1)], 'idx_users_reset_token', sparse=True,
            )
            return True
        except PyMongoError as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=doc['_id'],
            email=doc['email'],
            name=doc.get('name'),
            role=UserRole(doc.get('role', UserRole.USER.value)),
            created_at=doc['created_at'],
            updated_at=doc['updated_at'],
            password_hash=doc.get('password_hash'),
            password_changed_at=doc.get('password_changed_at'),
            password_reset_token=doc.get('password_reset_token'),
            password_reset_expires=doc.get('password_reset_expires'),
        )

    def _find_one(self, query: dict, include_hash: bool = False) -> User | None:
        projection = None if include_hash else _WITHOUT_HASH
        doc = self.collection.find_one(query, projection)
        return self._to_domain(doc) if doc else None

    def create(
        self,
        email: str,
        password_hash: str,
        name: str | None = None,
        role: UserRole = UserRole.USER,
    ) -> User | None:
        """Create a new user and return the User object (without its hash).

        Raises:
            ConflictError: email already registered
        """
        user_id = uuid.uuid4().hex
        now = datetime.now(timezone.utc)
        user_doc = {
            '_id': user_id,
            'email': email,
            'name': name,
            'role': role.value,
            'password_hash': password_hash,
            'created_at': now,
            'updated_at': now,
        }
        try:
            self.collection.insert_one(user_doc)
        except DuplicateKeyError:
            logger.warning("User creation failed: email already exists", extra={"email": email})
            raise ConflictError(f"Duplicate field value: '{email}'. Please use another value!")
        except PyMongoError as e:
            logger.error("Failed to create user", extra={"email": email, "error": str(e)})
            return None

        user = self._to_domain(user_doc)
        user.password_hash = None
        logger.info("User created", extra={"userId": user_id, "email": email})
        return user

    def save(self, user: User, skip_validation: bool = False) -> bool:
        """Write the mutable fields of ``user`` back. Return True if the user exists."""
        if not skip_validation:
            user.validate()

        fields = {
            'email': user.email,
            'name': user.name,
            'role': user.role.value,
            'updated_at': datetime.now(timezone.utc),
            'password_changed_at': user.password_changed_at,
        }
        if user.password_hash:
            fields['password_hash'] = user.password_hash

        unset = {}
        for name in _RESET_FIELDS:
            value = getattr(user, name)
            if value is None:
                unset[name] = ''
            else:
                fields[name] = value

        update = {'$set': fields}
        if unset:
            update['$unset'] = unset

        try:
            result = self.collection.update_one({'_id': user.id}, update)
        except DuplicateKeyError:
            raise ConflictError(f"Duplicate field value: '{user.email}'. Please use another value!")
        except PyMongoError as e:
            logger.error("Failed to save user", extra={"userId": user.id, "error": str(e)})
            return False

        if result.matched_count == 0:
            logger.warning("Save matched no user", extra={"userId": user.id})
            return False
        return True

    def find_by_email(self, email: str, include_hash: bool = False) -> User | None:
        """Find a user by email. Return User or None if not found."""
        try:
            return self._find_one({'email': email}, include_hash)
        except PyMongoError as e:
            logger.error("Failed to get user by email", extra={"email": email, "error": str(e)})
            return None

    def get_by_id(self, user_id: str, include_hash: bool = False) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        try:
            return self._find_one({'_id': user_id}, include_hash)
        except PyMongoError as e:
            logger.error("Failed to get user by ID", extra={"userId": user_id, "error": str(e)})
            return None

    def find_by_reset_token(self, token_hash: str, now: datetime) -> User | None:
        """Find the user holding an unexpired reset token with this hash."""
        try:
            return self._find_one({
                'password_reset_token': token_hash,
                'password_reset_expires': {'$gt': now},
            })
        except PyMongoError as e:
            logger.error("Failed to get user by reset token", extra={"error": str(e)})
            return None
