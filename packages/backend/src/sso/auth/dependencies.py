"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to turn a Bearer
token back into trusted claims. Verification is signature + expiry
only; storage is not consulted.

    get_current_claims → any valid session token
    require_admin      → a valid token whose role claim is "admin"
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException

from sso.auth.jwt import TokenClaims, TokenError, TokenIssuer
from sso.config import settings
from sso.domain.models import Role


def get_token_issuer() -> TokenIssuer:
    return TokenIssuer(settings.jwt_secret, settings.jwt_algorithm)


async def get_current_claims(
    authorization: Optional[str] = Header(None),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> TokenClaims:
    """Extract and verify the Bearer token (401 if missing or invalid)."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return tokens.verify(authorization[7:])
    except TokenError as e:
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


async def require_admin(
    claims: TokenClaims = Depends(get_current_claims),
) -> TokenClaims:
    if claims.role != Role.ADMIN.value:
        raise HTTPException(status_code=403, detail="Admin role required")
    return claims
