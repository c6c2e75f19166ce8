"""
Bearer-token authentication

Token verification belongs to an external identity provider; routes only see
the user id an IdentityVerifier returns.
"""

from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from utils.exceptions import AuthenticationError

bearer_scheme = HTTPBearer(auto_error=False)


class IdentityVerifier:
    """Interface for the identity provider that validates bearer tokens"""

    def verify(self, token: str) -> str:
        """Return the user id (subject) for a valid token, raise AuthenticationError otherwise"""
        raise NotImplementedError


class UnconfiguredVerifier(IdentityVerifier):
    def verify(self, token: str) -> str:
        raise AuthenticationError("Authentication is not configured")


identity_verifier = UnconfiguredVerifier()


def get_identity_verifier() -> IdentityVerifier:
    return identity_verifier


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Missing token")
    try:
        return verifier.verify(credentials.credentials)
    except AuthenticationError:
        raise HTTPException(status_code=401, detail="Invalid token")
