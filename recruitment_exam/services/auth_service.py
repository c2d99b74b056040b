"""
services/auth_service.py

Account registration, sign-in and password reset.
Public API:
  - AuthProvider            : hosted identity boundary
  - FirebaseAuthProvider    : Firebase Identity Toolkit REST (httpx)
  - LocalAuthProvider       : in-process provider for local runs and tests
  - AuthService             : provider + ``users`` profile documents

Provider failures are raised as AuthError with a one-line message that the
HTTP layer shows verbatim.
"""

import hashlib
import logging
import secrets
import threading
from abc import ABC, abstractmethod
from typing import Dict, NamedTuple, Optional, Tuple

import httpx
from pydantic import ValidationError

from recruitment_exam.errors import AuthError, StoreError
from recruitment_exam.models.user_model import LoginForm, PasswordResetForm, SignupForm, UserProfile
from recruitment_exam.services.window_policy import Clock, utcnow
from recruitment_exam.store.base import USERS_COLLECTION, DocumentStore

logger = logging.getLogger(__name__)


class AuthSession(NamedTuple):
    user_id: str
    token: str


class AuthProvider(ABC):

    @abstractmethod
    def sign_up(self, email: str, password: str) -> AuthSession:
        ...

    @abstractmethod
    def sign_in(self, email: str, password: str) -> AuthSession:
        ...

    @abstractmethod
    def current_user(self, token: str) -> Optional[str]:
        """User id behind a session token, or None if the token is not valid."""

    @abstractmethod
    def send_password_reset(self, email: str) -> None:
        ...

    def sign_out(self, token: str) -> None:
        """Invalidate a token where the provider supports it."""

    def close(self) -> None:
        pass


# ── Firebase ─────────────────────────────────────────────────────────────────

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

# Identity Toolkit error codes -> candidate-facing text.
_FIREBASE_MESSAGES: Dict[str, str] = {
    "EMAIL_EXISTS": "An account with this email already exists.",
    "EMAIL_NOT_FOUND": "No account found with this email.",
    "INVALID_PASSWORD": "Incorrect password.",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password.",
    "INVALID_EMAIL": "Email address is not valid.",
    "USER_DISABLED": "This account has been disabled.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Please try again later.",
    "WEAK_PASSWORD": "Password should be at least 6 characters.",
    "INVALID_ID_TOKEN": "Your session has expired. Please sign in again.",
}


def firebase_message(code: str) -> str:
    # Codes may carry detail after a colon, e.g. "WEAK_PASSWORD : Password ...".
    key = code.split(":", 1)[0].strip()
    return _FIREBASE_MESSAGES.get(key, code.replace("_", " ").capitalize())


class FirebaseAuthProvider(AuthProvider):

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
        base_url: str = IDENTITY_TOOLKIT_URL,
    ):
        if not api_key:
            raise RuntimeError("Firebase API key is not set.")
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)

    def _call(self, method: str, payload: dict) -> dict:
        url = f"{self._base_url}/accounts:{method}"
        try:
            resp = self._client.post(url, params={"key": self._api_key}, json=payload)
        except httpx.TimeoutException as e:
            raise AuthError("Authentication service timed out. Please try again.", cause=e) from e
        except httpx.HTTPError as e:
            raise AuthError("Authentication service is unreachable. Please try again.", cause=e) from e

        if resp.is_error:
            code = "UNKNOWN_ERROR"
            try:
                code = resp.json().get("error", {}).get("message", code)
            except ValueError:
                pass
            logger.info(f"Identity Toolkit {method} rejected: {code}")
            raise AuthError(firebase_message(code))
        return resp.json()

    def sign_up(self, email: str, password: str) -> AuthSession:
        data = self._call("signUp", {"email": email, "password": password, "returnSecureToken": True})
        return AuthSession(data["localId"], data["idToken"])

    def sign_in(self, email: str, password: str) -> AuthSession:
        data = self._call(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return AuthSession(data["localId"], data["idToken"])

    def current_user(self, token: str) -> Optional[str]:
        if not token:
            return None
        try:
            data = self._call("lookup", {"idToken": token})
        except AuthError:
            return None
        users = data.get("users") or []
        return users[0].get("localId") if users else None

    def send_password_reset(self, email: str) -> None:
        self._call("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})

    def close(self) -> None:
        self._client.close()


# ── Local ────────────────────────────────────────────────────────────────────

_PBKDF2_ROUNDS = 100_000


def _hash_password(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ROUNDS)


class LocalAuthProvider(AuthProvider):
    """Accounts and tokens held in memory; reset emails are only logged."""

    def __init__(self):
        self._lock = threading.Lock()
        self._accounts: Dict[str, Tuple[str, bytes, bytes]] = {}  # email -> (uid, salt, hash)
        self._tokens: Dict[str, str] = {}  # token -> uid

    def _issue(self, user_id: str) -> AuthSession:
        token = secrets.token_urlsafe(32)
        self._tokens[token] = user_id
        return AuthSession(user_id, token)

    def sign_up(self, email: str, password: str) -> AuthSession:
        if len(password) < 6:
            raise AuthError(_FIREBASE_MESSAGES["WEAK_PASSWORD"])
        key = email.lower()
        salt = secrets.token_bytes(16)
        with self._lock:
            if key in self._accounts:
                raise AuthError(_FIREBASE_MESSAGES["EMAIL_EXISTS"])
            user_id = secrets.token_hex(14)
            self._accounts[key] = (user_id, salt, _hash_password(password, salt))
            return self._issue(user_id)

    def sign_in(self, email: str, password: str) -> AuthSession:
        with self._lock:
            account = self._accounts.get(email.lower())
            if account is None:
                raise AuthError(_FIREBASE_MESSAGES["INVALID_LOGIN_CREDENTIALS"])
            user_id, salt, expected = account
            if not secrets.compare_digest(_hash_password(password, salt), expected):
                raise AuthError(_FIREBASE_MESSAGES["INVALID_LOGIN_CREDENTIALS"])
            return self._issue(user_id)

    def current_user(self, token: str) -> Optional[str]:
        with self._lock:
            return self._tokens.get(token)

    def send_password_reset(self, email: str) -> None:
        with self._lock:
            known = email.lower() in self._accounts
        # Same outcome either way so the endpoint does not reveal accounts.
        logger.info(f"Password reset requested for {email} (known={known})")

    def sign_out(self, token: str) -> None:
        with self._lock:
            self._tokens.pop(token, None)


# ── Account service ──────────────────────────────────────────────────────────

class AuthService:

    def __init__(self, provider: AuthProvider, store: DocumentStore, clock: Clock = utcnow):
        self._provider = provider
        self._store = store
        self._clock = clock

    def signup(self, form: SignupForm) -> Tuple[AuthSession, UserProfile]:
        session = self._provider.sign_up(form.email, form.password)
        now = self._clock()
        profile = UserProfile(
            id=session.user_id,
            name=form.name,
            email=form.email,
            phone=form.phone,
            admission_number=form.admission_number,
            branch=form.branch,
            created_at=now,
            updated_at=now,
        )
        try:
            self._store.set(USERS_COLLECTION, profile.id, profile.to_document())
        except StoreError as e:
            raise AuthError(f"Account created but profile could not be saved: {e.message}", cause=e) from e
        logger.info(f"Registered {profile.email} ({profile.branch})")
        return session, profile

    def login(self, form: LoginForm) -> Tuple[AuthSession, UserProfile]:
        session = self._provider.sign_in(form.email, form.password)
        profile = self.get_profile(session.user_id)
        if profile is None:
            raise AuthError("User profile not found. Please contact the administrator.")
        return session, profile

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        try:
            doc = self._store.get(USERS_COLLECTION, user_id)
        except StoreError as e:
            raise AuthError(f"Failed to load user profile: {e.message}", cause=e) from e
        if doc is None:
            return None
        try:
            return UserProfile.model_validate({**doc, "id": user_id})
        except ValidationError as e:
            raise AuthError("User profile is incomplete. Please contact the administrator.", cause=e) from e

    def current_profile(self, token: Optional[str]) -> Optional[UserProfile]:
        if not token:
            return None
        user_id = self._provider.current_user(token)
        if user_id is None:
            return None
        return self.get_profile(user_id)

    def reset_password(self, form: PasswordResetForm) -> None:
        self._provider.send_password_reset(form.email)

    def logout(self, token: Optional[str]) -> None:
        if token:
            self._provider.sign_out(token)
