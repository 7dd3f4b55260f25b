"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers (or on a whole
router) to run the AuthGate and hand the resolved Account to the handler.
The TokenCodec lives on app.state, built once from Settings in create_app().
"""

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.auth.gate import AuthGate, AuthRejected
from taskgate.auth.jwt import TokenCodec
from taskgate.db.engine import get_db
from taskgate.db.models import Account
from taskgate.services.account_service import AccountService


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_auth_gate(codec: TokenCodec = Depends(get_token_codec)) -> AuthGate:
    return AuthGate(codec)


async def get_current_account(
    request: Request,
    db: AsyncSession = Depends(get_db),
    gate: AuthGate = Depends(get_auth_gate),
) -> Account:
    """Resolve the authenticated account (required — 401 if no valid token)."""
    try:
        return await gate.admit(request, AccountService(db))
    except AuthRejected as e:
        headers = {"WWW-Authenticate": "Bearer"} if e.status_code == 401 else None
        raise HTTPException(status_code=e.status_code, detail=e.detail, headers=headers)
