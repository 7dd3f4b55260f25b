"""Auth API — registration, login, logout, current account.

Learn: Routes for the account lifecycle:
- POST /auth/register → create an account
- POST /auth/login → username/password → token (JSON body + "token" cookie)
- GET /auth/logout → clear the cookie (requires auth)
- GET /auth/me → current account info (requires auth)
- DELETE /auth/me → delete the current account and its tasks (requires auth)

Login answers 400 for both an unknown username and a wrong password,
so the response never tells which usernames exist.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.auth.dependencies import get_current_account, get_token_codec
from taskgate.auth.gate import TOKEN_COOKIE
from taskgate.auth.jwt import TokenCodec
from taskgate.db.engine import get_db
from taskgate.db.models import Account
from taskgate.schemas.account import (
    AccountRead,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
)
from taskgate.services.account_service import (
    AccountService,
    InvalidCredentialsError,
    UsernameTakenError,
)

router = APIRouter(prefix="/auth")


def _account_svc(db: AsyncSession = Depends(get_db)) -> AccountService:
    return AccountService(db)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=AccountRead)
async def register(body: RegisterRequest, svc: AccountService = Depends(_account_svc)):
    """Create a new account."""
    try:
        return await svc.register(body.username, body.password)
    except UsernameTakenError:
        raise HTTPException(status_code=409, detail="Username already registered")


# ─── Login / logout ──────────────────────────────────────


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    svc: AccountService = Depends(_account_svc),
    codec: TokenCodec = Depends(get_token_codec),
):
    """Login with username and password → token.

    The token is returned in the body (for Authorization: Bearer clients)
    and set as an HTTP-only cookie (for browsers). rememberMe makes the
    cookie persistent; otherwise it is a session cookie.
    """
    try:
        account = await svc.verify(body.username, body.password)
    except InvalidCredentialsError:
        raise HTTPException(status_code=400, detail="Invalid credentials")

    token = codec.issue(account.id)

    settings = request.app.state.settings
    max_age = settings.remember_me_days * 24 * 60 * 60 if body.remember_me else None
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=max_age,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )
    return TokenResponse(token=token)


@router.get("/logout")
async def logout(
    request: Request,
    response: Response,
    account: Account = Depends(get_current_account),
):
    """Clear the token cookie.

    Tokens are stateless, so a bearer token copied elsewhere stays valid.
    """
    _clear_token_cookie(request, response)
    return {"logged_out": True}


# ─── Current account ────────────────────────────────────


@router.get("/me", response_model=AccountRead)
async def get_me(account: Account = Depends(get_current_account)):
    """Get the current authenticated account."""
    return account


@router.delete("/me", status_code=204)
async def delete_me(
    request: Request,
    account: Account = Depends(get_current_account),
    svc: AccountService = Depends(_account_svc),
):
    """Delete the current account. Its tasks are removed by cascade."""
    await svc.delete_account(account.id)
    response = Response(status_code=204)
    _clear_token_cookie(request, response)
    return response


def _clear_token_cookie(request: Request, response: Response) -> None:
    response.delete_cookie(
        TOKEN_COOKIE,
        path="/",
        secure=request.app.state.settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )
