"""User lifecycle and authentication against the ledger database.

:class:`UserService` wraps a caller-owned SQLAlchemy session (the store
handle). Mutating operations commit through that session; callers decide the
session's lifetime (``db.client.session_scope`` or one session per request).

Email uniqueness is checked before every write and is backed by the
``uq_users_email`` constraint, which settles any race between two writers that
both pass the check.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from db.models.ledger import User
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import Conflict, DuplicateRecords, InvalidArgument, NotFound
from .logging_setup import get_logger
from .models import UserDto
from .passwords import derive_password_hash, verify_password_hash

_logger = get_logger("split_ledger.users")


def coerce_user_id(value: uuid.UUID | str) -> uuid.UUID:
    """Return ``value`` as a UUID, raising :class:`InvalidArgument` when malformed."""

    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError as e:
        raise InvalidArgument(f"Invalid user id: {value!r}", param="user_id") from e


def _email_taken_message(email: str) -> str:
    return f'Email "{email}" is already taken'


def to_dto(user: User, *, token: str | None = None) -> UserDto:
    return UserDto(
        user_id=user.user_id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        token=token,
    )


class UserService:
    def __init__(self, session: Session) -> None:
        self._session = session

    # ---- Lookups -------------------------------------------------------------

    def get_all(self) -> Sequence[User]:
        return self._session.scalars(select(User).order_by(User.email)).all()

    def get_by_id(self, user_id: uuid.UUID | str) -> User | None:
        return self._session.get(User, coerce_user_id(user_id))

    def get_by_email(self, email: str) -> User:
        """Return the single user registered under ``email``.

        Raises :class:`NotFound` when nobody matches and
        :class:`DuplicateRecords` when several rows match, which means the
        uniqueness invariant has been broken in storage.
        """

        rows = self._session.scalars(select(User).where(User.email == email).limit(2)).all()
        if not rows:
            raise NotFound(f'No user with email "{email}"')
        if len(rows) > 1:
            raise DuplicateRecords(f'Multiple users share email "{email}"')
        return rows[0]

    def _email_exists(self, email: str, *, exclude: uuid.UUID | None = None) -> bool:
        stmt = select(User.user_id).where(User.email == email)
        if exclude is not None:
            stmt = stmt.where(User.user_id != exclude)
        return self._session.scalars(stmt.limit(1)).first() is not None

    # ---- Authentication ------------------------------------------------------

    def authenticate(self, email: str | None, password: str | None) -> User | None:
        """Return the matching user, or ``None`` when the credentials do not match.

        Unknown email and wrong password are indistinguishable to the caller.
        """

        if not email or not password or not password.strip():
            return None

        user = self._session.scalars(select(User).where(User.email == email)).first()
        if user is None or user.password_hash is None:
            _logger.info("authentication failed")
            return None

        try:
            ok = verify_password_hash(password, user.password_hash, user.password_salt)
        except InvalidArgument as e:
            _logger.error("stored credentials for user %s are malformed: %s", user.user_id, e)
            return None

        if not ok:
            _logger.info("authentication failed")
            return None

        _logger.info("user %s authenticated", user.user_id)
        return user

    # ---- Lifecycle -----------------------------------------------------------

    def create(self, user: User, password: str | None) -> User:
        """Register ``user`` with ``password`` and return it with its id populated."""

        if password is None or not password.strip():
            raise InvalidArgument("Password is required", param="password")
        if not user.email or not user.email.strip():
            raise InvalidArgument("Email is required", param="email")

        if self._email_exists(user.email):
            raise Conflict(_email_taken_message(user.email))

        creds = derive_password_hash(password)
        user.password_hash = creds.hash
        user.password_salt = creds.salt
        if user.user_id is None:
            user.user_id = uuid.uuid4()

        self._session.add(user)
        self._commit(email=user.email)
        _logger.info("user %s created", user.user_id)
        return user

    def update(self, user_param: User, password: str | None = None) -> None:
        """Overwrite profile fields of the stored user; re-hash when a password is given."""

        user = self._session.get(User, coerce_user_id(user_param.user_id))
        if user is None:
            raise NotFound("User not found")

        if not user_param.email or not user_param.email.strip():
            raise InvalidArgument("Email is required", param="email")

        if user_param.email != user.email and self._email_exists(
            user_param.email, exclude=user.user_id
        ):
            raise Conflict(_email_taken_message(user_param.email))

        user.first_name = user_param.first_name
        user.last_name = user_param.last_name
        user.email = user_param.email

        if password is not None and password.strip():
            creds = derive_password_hash(password)
            user.password_hash = creds.hash
            user.password_salt = creds.salt

        self._commit(email=user.email, exclude=user.user_id)
        _logger.info("user %s updated", user.user_id)

    def delete(self, user_id: uuid.UUID | str) -> None:
        """Hard-delete the user and everything they own; absent ids are a no-op."""

        user = self._session.get(User, coerce_user_id(user_id))
        if user is None:
            return
        self._session.delete(user)
        self._session.commit()
        _logger.info("user %s deleted", user_id)

    def _commit(self, *, email: str, exclude: uuid.UUID | None = None) -> None:
        try:
            self._session.commit()
        except IntegrityError:
            self._session.rollback()
            if self._email_exists(email, exclude=exclude):
                raise Conflict(_email_taken_message(email)) from None
            raise


__all__ = [
    "UserService",
    "coerce_user_id",
    "to_dto",
]
