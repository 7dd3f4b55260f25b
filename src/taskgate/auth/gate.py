"""Authentication gate — the per-request token pipeline.

Learn: Every protected request runs the same stages, in order, and any
stage can stop the request with a rejection:

    extract → verify → parse_subject → resolve → admit

1. extract: the "token" cookie wins; otherwise "Authorization: Bearer ...".
2. verify: signature check through the TokenCodec.
3. parse_subject: the subject must be an integer account id. A token we
   signed with a non-integer subject is our bug, hence 500, not 401.
4. resolve: load the account by id, on every request, with no cache.
   A correctly signed token for a deleted account is rejected here.
5. admit: attach the account to request.state and bind it to the log
   context. The handler's response is not touched.
"""

from typing import Optional

import structlog
from starlette.requests import Request

from taskgate.auth.jwt import TokenCodec, TokenError
from taskgate.db.models import Account
from taskgate.services.account_service import AccountService

logger = structlog.get_logger()

TOKEN_COOKIE = "token"


class AuthRejected(Exception):
    """A gate stage refused the request."""

    def __init__(self, status_code: int, detail: str, stage: str):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.stage = stage


class AuthGate:
    """Runs the authentication stages for one request at a time."""

    def __init__(self, codec: TokenCodec):
        self.codec = codec

    async def admit(self, request: Request, accounts: AccountService) -> Account:
        """Run every stage and return the live account, or raise AuthRejected."""
        try:
            token = self.extract(request)
            subject = self.verify(token)
            account_id = self.parse_subject(subject)
            account = await self.resolve(account_id, accounts)
        except AuthRejected as e:
            logger.warning(
                "auth.rejected",
                stage=e.stage,
                status_code=e.status_code,
                path=request.url.path,
            )
            raise

        request.state.account = account
        structlog.contextvars.bind_contextvars(account_id=account.id)
        return account

    # ─── Stages ──────────────────────────────────────────

    def extract(self, request: Request) -> str:
        token = request.cookies.get(TOKEN_COOKIE) or _bearer_token(
            request.headers.get("Authorization")
        )
        if not token:
            raise AuthRejected(401, "Authentication required", stage="extract")
        return token

    def verify(self, token: str) -> str:
        try:
            return self.codec.verify(token)
        except TokenError:
            raise AuthRejected(401, "Invalid token", stage="verify")

    def parse_subject(self, subject: str) -> int:
        try:
            return int(subject)
        except ValueError:
            raise AuthRejected(500, "Internal server error", stage="parse_subject")

    async def resolve(self, account_id: int, accounts: AccountService) -> Account:
        account = await accounts.get_account(account_id)
        if account is None:
            raise AuthRejected(401, "Invalid token", stage="resolve")
        return account


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Pull the credentials out of an "Authorization: Bearer <token>" header."""
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credentials.strip() or None
