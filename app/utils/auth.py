from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict

import jwt
from fastapi import HTTPException, Request
from jwt import PyJWKClient

from app.settings import settings
from app.utils.log import logger

BEARER_SCHEME = "bearer"
SESSION_EXPIRED = "Invalid or expired session. Please log in again."

LOCAL_DEV_CLAIMS = {
    "cognito:username": "localdevuser",
    "email": "local-dev@example.com",
    "token_use": "id",
}


class TokenVerifier:
    """
    Verifies Cognito ID tokens.

    The JWKS client is built on first use and kept, so signing keys are
    fetched once per process rather than once per request.
    """

    def __init__(self, issuer_url: str, audience: str):
        self.issuer = issuer_url.rstrip("/")
        self.audience = audience
        self._jwks_client: PyJWKClient | None = None

    @property
    def jwks_url(self) -> str:
        # <issuer>/.well-known/jwks.json, e.g.
        # https://cognito-idp.eu-west-2.amazonaws.com/eu-west-2_XXXX/.well-known/jwks.json
        return f"{self.issuer}/.well-known/jwks.json"

    @property
    def jwks_client(self) -> PyJWKClient:
        if self._jwks_client is None:
            self._jwks_client = PyJWKClient(self.jwks_url)
        return self._jwks_client

    def verify(self, token: str) -> Dict[str, Any]:
        signing_key = self.jwks_client.get_signing_key_from_jwt(token).key
        claims = jwt.decode(
            token,
            signing_key,
            algorithms=["RS256"],
            issuer=self.issuer,
            audience=self.audience,
            options={"require": ["exp", "sub"]},
        )
        # access tokens are signed by the same keys but carry no email/username
        if claims.get("token_use") != "id":
            raise jwt.InvalidTokenError(
                f"expected an id token, got token_use={claims.get('token_use')}"
            )
        return claims


@lru_cache
def get_verifier() -> TokenVerifier:
    if not settings.COGNITO_ISSUER_URL:
        logger.error("COGNITO_ISSUER_URL is not configured")
        raise HTTPException(status_code=500, detail="Authentication is not configured")
    return TokenVerifier(settings.COGNITO_ISSUER_URL, settings.COGNITO_AUDIENCE)


def get_bearer_token(request: Request) -> str:
    """Token from the Authorization header, with or without the Bearer prefix."""
    scheme, _, rest = (request.headers.get("authorization") or "").strip().partition(" ")
    token = rest.strip() if scheme.lower() == BEARER_SCHEME else scheme

    # a bare "Bearer" is a missing token, not a token called "Bearer"
    if not token or token.lower() == BEARER_SCHEME:
        logger.warning("Request without a bearer token")
        raise HTTPException(status_code=401, detail="No authorization header")
    return token


def describe_claims(claims: Dict[str, Any]) -> str:
    exp = claims.get("exp")
    expires = (
        datetime.fromtimestamp(exp, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
        if exp
        else "never"
    )
    return f"sub={claims.get('sub')} expires={expires}"


def username_from_claims(claims: Dict[str, Any]) -> str:
    """Cognito username for admin API calls; falls back to the sub."""
    return claims.get("cognito:username") or claims["sub"]


async def require_auth(request: Request) -> Dict[str, Any]:
    """
    FastAPI dependency: the verified ID token claims of the caller, or 401.
    """
    if settings.DISABLE_AUTH_FOR_LOCAL_DEV:
        logger.warning("Auth disabled for local dev, using fake claims")
        return {"sub": settings.DEV_USER_SUB or "LOCAL-DEV-USER", **LOCAL_DEV_CLAIMS}

    token = get_bearer_token(request)
    verifier = get_verifier()

    try:
        claims = verifier.verify(token)
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired ID token")
        raise HTTPException(status_code=401, detail=SESSION_EXPIRED)
    except jwt.PyJWTError as e:
        logger.warning(f"Rejected ID token: {e}")
        raise HTTPException(status_code=401, detail=SESSION_EXPIRED)
    except Exception as e:
        # never log the token itself
        logger.exception(f"Unexpected error verifying ID token: {e}")
        raise HTTPException(status_code=401, detail=SESSION_EXPIRED)

    logger.debug(f"Authenticated {describe_claims(claims)}")
    return claims
