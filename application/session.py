"""Session store - authentication state persisted in client storage"""
import json
import logging
from typing import Callable, List, Optional

from pydantic import ValidationError

from application.services import AuthService
from domain.auth import AuthResult, Session, User
from domain.enums import StorageKey, UserRole
from domain.storage import KeyValueStorage
from infrastructure.http_client import ApiError, error_message

logger = logging.getLogger(__name__)

LOGIN_FAILED = "Failed to login. Please try again."
REGISTRATION_FAILED = "Registration failed. Please try again."

Listener = Callable[[Optional[User]], None]


class SessionStore:
    """Current user and bearer token.

    The store is the only writer of the token and user keys. Both keys are
    written and removed together.
    """

    def __init__(self, auth_service: AuthService, storage: KeyValueStorage):
        self.auth_service = auth_service
        self.storage = storage
        self.user: Optional[User] = None
        self.error: Optional[str] = None
        self.loading = False
        self._listeners: List[Listener] = []

    # ==================== QUERIES ====================
    @property
    def token(self) -> Optional[str]:
        return self.storage.get(StorageKey.TOKEN.value)

    @property
    def session(self) -> Optional[Session]:
        token = self.token
        if self.user is None or not token:
            return None
        return Session(token=token, user=self.user)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.is_admin

    @property
    def theme(self) -> Optional[str]:
        return self.storage.get(StorageKey.THEME.value)

    def set_theme(self, theme: str) -> None:
        self.storage.set(StorageKey.THEME.value, theme)

    # ==================== SUBSCRIPTIONS ====================
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new user after every change"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_user(self, user: Optional[User]) -> None:
        self.user = user
        for listener in list(self._listeners):
            listener(user)

    # ==================== LIFECYCLE ====================
    def hydrate(self) -> Optional[User]:
        """Restore the session persisted by a previous run"""
        stored_user = self.storage.get(StorageKey.USER.value)
        stored_token = self.storage.get(StorageKey.TOKEN.value)

        if stored_user and stored_token:
            try:
                user = User.model_validate(json.loads(stored_user))
            except (ValueError, ValidationError):
                logger.warning("Discarding unreadable stored session")
                self._clear_storage()
                self._set_user(None)
            else:
                self._set_user(user)
        elif stored_user or stored_token:
            logger.warning("Discarding half-written stored session")
            self._clear_storage()
        self.loading = False
        return self.user

    def _persist(self, token: str, user: User) -> None:
        self.storage.set(StorageKey.TOKEN.value, token)
        self.storage.set(StorageKey.USER.value, json.dumps(user.model_dump(mode="json", by_alias=True)))

    def _clear_storage(self) -> None:
        self.storage.remove(StorageKey.TOKEN.value)
        self.storage.remove(StorageKey.USER.value)

    async def login(self, username: str, password: str) -> AuthResult:
        """Log in and persist the session; prior state is kept on failure"""
        self.error = None
        self.loading = True
        try:
            result = await self.auth_service.login(username, password)
        except ApiError as e:
            logger.error("Login failed for %s: %s", username, e)
            self.error = error_message(e, LOGIN_FAILED)
            return AuthResult(success=False, error=self.error)
        finally:
            self.loading = False

        user = result.to_user()
        self._persist(result.token, user)
        self._set_user(user)
        logger.info("Logged in as %s", user.username)
        return AuthResult(success=True)

    async def register(
        self,
        username: str,
        password: str,
        role: UserRole = UserRole.CUSTOMER
    ) -> AuthResult:
        """Create an account, then log in with the same credentials"""
        self.error = None
        self.loading = True
        try:
            await self.auth_service.register(username, password, role)
        except ApiError as e:
            logger.error("Registration failed for %s: %s", username, e)
            self.error = error_message(e, REGISTRATION_FAILED)
            self.loading = False
            return AuthResult(success=False, error=self.error)
        return await self.login(username, password)

    def logout(self) -> None:
        """Drop the session; safe to call when logged out"""
        self._clear_storage()
        self.error = None
        self._set_user(None)
