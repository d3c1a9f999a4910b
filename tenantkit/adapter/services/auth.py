import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from tenantkit.api.utils.jwt import verify_jwt
from tenantkit.app.services.ports import AuthService
from tenantkit.domain.auth import ANONYMOUS_PRINCIPAL, Principal, create_principal

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"


@dataclass(frozen=True)
class Credentials:
    """Raw request credentials handed to the auth service by the transport"""

    headers: Mapping[str, str] = field(default_factory=dict)
    cookies: Mapping[str, str] = field(default_factory=dict)


class JwtAuthService(AuthService):
    """
    Bearer JWT authentication.

    The token is read from the Authorization header, falling back to the
    access_token cookie. Any failure yields ANONYMOUS_PRINCIPAL.
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        subject_claim: str = "sub",
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.subject_claim = subject_claim

    @staticmethod
    def extract_token(credentials: Credentials) -> Optional[str]:
        headers = {key.lower(): value for key, value in credentials.headers.items()}
        authorization = headers.get("authorization", "")
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
        return credentials.cookies.get(ACCESS_TOKEN_COOKIE) or None

    async def authenticate(self, auth_input: Any) -> Principal:
        if not isinstance(auth_input, Credentials):
            return ANONYMOUS_PRINCIPAL

        token = self.extract_token(auth_input)
        if token is None:
            return ANONYMOUS_PRINCIPAL

        payload = verify_jwt(token, self.secret, self.algorithm)
        if payload is None:
            logger.info("Rejected invalid or expired token")
            return ANONYMOUS_PRINCIPAL

        subject = payload.get(self.subject_claim)
        if not isinstance(subject, str) or not subject:
            logger.info("Token has no '%s' claim", self.subject_claim)
            return ANONYMOUS_PRINCIPAL

        return create_principal(subject, payload.get("user_id"))
