"""
FastAPI dependencies: the account service per request and the bearer
token gate for protected routes.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from database import get_db
from errors import InvalidToken, Unauthorized
from repository import UserRepository
from service import AccountService
from tokens import Claims, TokenIssuer

logger = logging.getLogger(__name__)


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_account_service(request: Request, db: Session = Depends(get_db)) -> AccountService:
    """Build the service around a request-scoped database session."""
    return AccountService(
        UserRepository(db),
        request.app.state.password_hasher,
        request.app.state.token_issuer,
    )


class AuthGate:
    """
    Require a valid ``Authorization: Bearer <token>`` header.

    Resolves to the verified :class:`Claims`; any failure short-circuits the
    request with 401 before the route handler runs.
    """

    def __init__(self) -> None:
        self._bearer = HTTPBearer(auto_error=False)

    async def __call__(
        self,
        request: Request,
        tokens: TokenIssuer = Depends(get_token_issuer),
    ) -> Claims:
        credentials: Optional[HTTPAuthorizationCredentials] = await self._bearer(request)
        if credentials is None:
            logger.info("Rejected %s %s: no bearer token", request.method, request.url.path)
            raise Unauthorized()

        try:
            return tokens.verify(credentials.credentials)
        except InvalidToken as exc:
            logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
            raise Unauthorized() from exc


require_claims = AuthGate()
