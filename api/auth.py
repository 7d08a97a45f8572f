"""
Bearer-token authentication for the write endpoints.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from api import messages
from api.config import config
from api.models import CallerIdentity

logger = structlog.get_logger(__name__)

# Security scheme; missing credentials are reported by verify_token as 401
security = HTTPBearer(auto_error=False)


def create_access_token(
    subject: str,
    expires_minutes: Optional[int] = None,
    extra_claims: Optional[Dict[str, Any]] = None
) -> str:
    """
    Issue a signed access token.

    Args:
        subject: Value of the ``sub`` claim
        expires_minutes: Lifetime in minutes (defaults to config)
        extra_claims: Additional claims to embed

    Returns:
        Encoded JWT
    """
    lifetime = config.access_token_expire_minutes if expires_minutes is None else expires_minutes
    claims = dict(extra_claims or {})
    claims.update({
        "sub": subject,
        "iat": datetime.utcnow(),
        "exp": datetime.utcnow() + timedelta(minutes=lifetime),
    })
    return jwt.encode(claims, config.secret_key, algorithm=config.algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify an access token.

    Raises:
        JWTError: If the signature, expiry or format is invalid
    """
    return jwt.decode(token, config.secret_key, algorithms=[config.algorithm])


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> CallerIdentity:
    """
    Verify the bearer token on the request.

    Args:
        credentials: HTTP authorization credentials

    Returns:
        Identity of the caller

    Raises:
        HTTPException: If the token is missing or invalid
    """
    if credentials is None:
        raise _unauthorized(messages.UNAUTHORIZED)

    try:
        claims = decode_access_token(credentials.credentials)
    except JWTError as e:
        logger.warning("Invalid token presented", error=str(e))
        raise _unauthorized(messages.INVALID_TOKEN)

    subject = claims.get("sub")
    if not subject:
        logger.warning("Token without subject presented")
        raise _unauthorized(messages.INVALID_TOKEN)

    return CallerIdentity(subject=subject, claims=claims)
