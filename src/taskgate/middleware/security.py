"""Security headers middleware.

Learn: The API only ever answers with JSON, and its one credential is
the "token" cookie. The headers follow from that:

- every response: no MIME sniffing, no framing, a CSP that forbids
  loading anything (a JSON body has no business running scripts)
- anything that can carry a token (all of /auth/*, or any response that
  sets the token cookie) is marked `no-store`
- HSTS whenever the token cookie is issued with Secure, or the request
  itself arrived over HTTPS; behind a TLS-terminating proxy the scheme
  reads http, so the cookie setting is the reliable signal
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from taskgate.auth.gate import TOKEN_COOKIE

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}

HSTS = "max-age=31536000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)

        if request.url.path.startswith("/auth/") or _sets_token_cookie(response):
            response.headers["Cache-Control"] = "no-store"

        if request.url.scheme == "https" or request.app.state.settings.cookie_secure:
            response.headers["Strict-Transport-Security"] = HSTS
        return response


def _sets_token_cookie(response: Response) -> bool:
    return any(
        value.startswith(f"{TOKEN_COOKIE}=")
        for value in response.headers.getlist("set-cookie")
    )
