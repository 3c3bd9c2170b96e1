import logging
import uuid
from dataclasses import dataclass

from auth import PasswordHasher
from errors import BadRequest, NotFound
from models import User, utcnow
from repository import UserRepository
from schemas import LoginRequest, UserRequest
from tokens import TokenIssuer

logger = logging.getLogger(__name__)

WRONG_PASSWORD_MESSAGE = "Password False!"


@dataclass(frozen=True)
class LoginResult:
    access_token: str


def _validate_credentials(username: str, password: str) -> None:
    if not username or not username.strip():
        raise BadRequest("username is required")
    if not password:
        raise BadRequest("password is required")


class AccountService:
    """
    Registration, login and profile management on top of the user store.
    """

    def __init__(self, repository: UserRepository, hasher: PasswordHasher, tokens: TokenIssuer):
        self.repository = repository
        self.hasher = hasher
        self.tokens = tokens

    def register(self, request: UserRequest) -> User:
        """
        Create a new account and issue its first access token.

        The new user is its own creator.
        """
        _validate_credentials(request.username, request.password)

        user_id = uuid.uuid4()
        user = User(
            id=user_id,
            username=request.username.strip(),
            name=request.name,
            password_hash=self.hasher.hash(request.password),
            role=request.role,
            created_at=utcnow(),
            created_by=user_id,
        )
        self.repository.create(user)

        user.access_token = self.tokens.issue(user.id, user.username, user.role)
        logger.info("Registered user %s (%s)", user.username, user.id)
        return user

    def login(self, request: LoginRequest) -> LoginResult:
        _validate_credentials(request.username, request.password)

        user = self.resolve_by_username(request.username.strip())
        if not self.hasher.verify(request.password, user.password_hash):
            logger.info("Login rejected for %s: wrong password", user.username)
            raise BadRequest(WRONG_PASSWORD_MESSAGE)

        token = self.tokens.issue(user.id, user.username, user.role)
        logger.info("Login: %s (%s)", user.username, user.id)
        return LoginResult(access_token=token)

    def resolve_by_username(self, username: str) -> User:
        """Look up a live user. Soft-deleted users are reported as missing."""
        user = self.repository.resolve_by_username(username)
        if user.is_deleted:
            raise NotFound("User")
        return user

    def update_profile(self, username: str, request: UserRequest) -> User:
        """
        Overwrite the profile of ``username`` with ``request``.

        The acting user is the profile owner. A fresh token is issued since
        the username or role may have changed.
        """
        _validate_credentials(request.username, request.password)

        user = self.resolve_by_username(username)
        user.username = request.username.strip()
        user.name = request.name
        user.password_hash = self.hasher.hash(request.password)
        user.role = request.role
        user.updated_at = utcnow()
        user.updated_by = user.id
        self.repository.update(user)

        user.access_token = self.tokens.issue(user.id, user.username, user.role)
        logger.info("Updated profile of %s (%s)", user.username, user.id)
        return user
