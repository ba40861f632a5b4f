from dataclasses import dataclass

from jose import JWTError, jwt


class AuthenticationError(Exception):
    """Raised when a bearer token is missing, malformed, or fails verification."""


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: str | None = None


class TokenVerifier:
    """Verifies platform-issued HS256 access tokens and extracts the user identity."""

    ALGORITHMS = ["HS256"]

    def __init__(self, *, secret: str, audience: str | None = None) -> None:
        self._secret = secret
        self._audience = audience or None

    def verify(self, token: str) -> AuthenticatedUser:
        """Decode ``token`` and return the user named by its ``sub`` claim.

        Raises:
            AuthenticationError: if the token is empty, invalid, expired, or has no subject.
        """
        if not token:
            raise AuthenticationError("Missing bearer token")
        if not self._secret:
            raise AuthenticationError("Token verification secret is not configured")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=self.ALGORITHMS,
                audience=self._audience,
            )
        except JWTError as exc:
            raise AuthenticationError(f"Invalid token: {exc}") from exc

        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid token: missing user ID")

        email = payload.get("email")
        return AuthenticatedUser(id=str(user_id), email=str(email) if email else None)
