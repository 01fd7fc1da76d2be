"""
Account sign-in for Bookshelf Sync.

Accounts live in the ``accounts`` table. The service keeps the identity of
the one signed-in user of this process and acts as its AuthContext.
"""

import threading
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import generate_password_hash, check_password_hash

from bookshelf.auth.context import AuthContext
from bookshelf.db.database import get_db_session
from bookshelf.db.models import Account
from bookshelf.sync.states import State, StateSlot
from bookshelf.utils.logging import get_logger, bind_user

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


@dataclass
class AuthError(Exception):
    """Raised when signing in or signing up is refused."""
    message: str

    def __str__(self) -> str:
        return self.message


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountAuthService(AuthContext):
    """
    Sign-in, sign-up and sign-out against local accounts.

    ``login_state`` follows Initial -> Loading -> Success | Error(message).
    """

    def __init__(self):
        self._uid: Optional[str] = None
        self._lock = threading.Lock()
        self.login_state: StateSlot[State[str]] = StateSlot("login", State.initial())

    def current_uid(self) -> Optional[str]:
        with self._lock:
            return self._uid

    def is_user_logged_in(self) -> bool:
        return self.current_uid() is not None

    def sign_in(self, email: str, password: str) -> bool:
        """Sign in with email and password."""
        return self._authenticate(email, password, self._check_credentials)

    def sign_up(self, email: str, password: str) -> bool:
        """Create an account and sign in with it."""
        return self._authenticate(email, password, self._create_account)

    def sign_out(self) -> None:
        with self._lock:
            uid, self._uid = self._uid, None
        bind_user(None)
        self.login_state.set(State.initial())
        if uid:
            logger.info("Signed out", uid=uid)

    def _authenticate(self, email: str, password: str, resolve) -> bool:
        if not email or not email.strip() or not password:
            self.login_state.set(State.error("Email and password are required"))
            return False

        self.login_state.set(State.loading())
        try:
            uid = resolve(normalize_email(email), password)
        except AuthError as e:
            logger.info("Authentication refused", email=normalize_email(email), reason=e.message)
            self.login_state.set(State.error(e.message))
            return False
        except Exception as e:
            logger.error("Authentication failed", error=str(e))
            self.login_state.set(State.error(f"Authentication failed: {e}"))
            return False

        with self._lock:
            self._uid = uid
        bind_user(uid)
        self.login_state.set(State.success(uid))
        logger.info("Signed in", uid=uid)
        return True

    def _check_credentials(self, email: str, password: str) -> str:
        with get_db_session() as session:
            account = session.query(Account).filter(Account.email == email).first()
            if account is None or not check_password_hash(account.password_hash, password):
                raise AuthError("Invalid email or password")
            return account.uid

    def _create_account(self, email: str, password: str) -> str:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        uid = uuid.uuid4().hex
        try:
            with get_db_session() as session:
                if session.query(Account).filter(Account.email == email).first():
                    raise AuthError("An account with this email already exists")
                session.add(Account(
                    uid=uid,
                    email=email,
                    password_hash=generate_password_hash(password),
                ))
        except IntegrityError as e:
            raise AuthError("An account with this email already exists") from e
        except SQLAlchemyError as e:
            raise AuthError(f"Could not create account: {e}") from e

        logger.info("Account created", uid=uid)
        return uid
