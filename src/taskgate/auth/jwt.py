"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The token
is a signed claims object; the server keeps no session table.

Claims carry the account id and nothing else: {"sub": "42"}. There is no
"exp" claim, and verification does not check one even when present.
Tokens therefore stay valid until the account is deleted (the auth gate
re-resolves the subject on every request) or the secret is rotated.
"""

import jwt


class TokenError(Exception):
    """Raised when token creation/verification fails."""


class TokenCodec:
    """Signs and verifies session tokens with one process-wide secret.

    Built once at startup from Settings and held on app.state; tests
    construct their own with a throwaway secret.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm

    def issue(self, account_id: int) -> str:
        """Create a signed token whose subject is the account id."""
        payload = {"sub": str(account_id)}
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """Check the signature and return the subject claim.

        Raises TokenError on a bad signature, a malformed token, or a
        missing/non-string subject.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "require": []},
            )
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}")

        subject = payload.get("sub")
        if not isinstance(subject, str):
            raise TokenError("Invalid token: missing subject")
        return subject
