import logging
from datetime import timedelta
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from auth import PasswordHasher
from config import Settings
from database import init_db, make_engine, make_session_factory
from dependencies import get_account_service, require_claims
from errors import AccountError
from schemas import ClaimsResponse, LoginRequest, LoginResponse, UserRequest, UserResponse
from service import AccountService
from tokens import Claims, TokenIssuer

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application and every component it uses from ``settings``.
    """
    settings = settings or Settings()

    engine = make_engine(settings.database_url)
    # Create database tables on startup (simple dev setup)
    init_db(engine)

    app = FastAPI(title="Account Service")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.password_hasher = PasswordHasher(settings.password_hash_rounds)
    app.state.token_issuer = TokenIssuer(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        issuer=settings.token_issuer,
        ttl=timedelta(seconds=settings.token_ttl_seconds),
    )

    app.add_exception_handler(AccountError, account_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    register_routes(app)
    return app


async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request body"
    return JSONResponse({"error": message}, status_code=status.HTTP_400_BAD_REQUEST)


def register_routes(app: FastAPI) -> None:
    @app.get("/health")
    def health():
        return {"status": "ok"}

    # ---------------- Registration / login ----------------

    @app.post(
        "/users",
        status_code=status.HTTP_201_CREATED,
        response_model=UserResponse,
        response_model_exclude_none=True,
    )
    def create_user(request: UserRequest, service: AccountService = Depends(get_account_service)):
        """Register a new user and return it with its first access token."""
        user = service.register(request)
        return UserResponse.from_user(user)

    @app.post("/users/login", response_model=LoginResponse)
    def login(request: LoginRequest, service: AccountService = Depends(get_account_service)):
        result = service.login(request)
        return LoginResponse(access_token=result.access_token)

    # ---------------- Protected ----------------

    @app.get("/users/validate", response_model=ClaimsResponse)
    def validate(claims: Claims = Depends(require_claims)):
        """Echo the verified claims of the caller's token."""
        return ClaimsResponse(**claims.to_dict())

    @app.get("/users/profile", response_model=UserResponse, response_model_exclude_none=True)
    def profile(
        claims: Claims = Depends(require_claims),
        service: AccountService = Depends(get_account_service),
    ):
        user = service.resolve_by_username(claims.username)
        return UserResponse.from_user(user)

    @app.put("/users/profile", response_model=UserResponse, response_model_exclude_none=True)
    def update_profile(
        request: UserRequest,
        claims: Claims = Depends(require_claims),
        service: AccountService = Depends(get_account_service),
    ):
        """Overwrite the caller's profile and return it with a fresh token."""
        user = service.update_profile(claims.username, request)
        return UserResponse.from_user(user)


def main() -> None:
    import uvicorn

    settings = Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
