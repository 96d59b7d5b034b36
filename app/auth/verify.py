"""
verify.py
---------
Purpose:
    JWT verification against the identity provider's JWKS.

Notes:
    - Signing keys are fetched from AUTH_JWKS_URL and cached by PyJWKClient.
    - Provides `auth_dependency` for protected routes such as the manual
      expiry check trigger.
"""

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from app.config import settings

SUPPORTED_ALGORITHMS = ["ES256", "RS256"]

_jwk_client = PyJWKClient(settings.AUTH_JWKS_URL)
_security = HTTPBearer()


def verify_jwt(token: str) -> dict:
    try:
        signing_key = _jwk_client.get_signing_key_from_jwt(token)
        decoded = jwt.decode(
            token,
            signing_key.key,
            algorithms=SUPPORTED_ALGORITHMS,
            audience=settings.AUTH_AUDIENCE,
            options={"verify_exp": True},
        )
        return decoded
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication token: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def auth_dependency(credentials: HTTPAuthorizationCredentials = Depends(_security)) -> dict:
    token = credentials.credentials
    return verify_jwt(token)
