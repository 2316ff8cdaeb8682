"""
Supabase Auth (GoTrue) client.

Credentials are only forwarded to GoTrue; nothing here stores them.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from conecta_rua.backend.base import BaseClient
from conecta_rua.core.constants import DEFAULT_AVATAR_INITIAL, DEFAULT_USER_NAME
from conecta_rua.core.exceptions import AuthError

logger = logging.getLogger(__name__)


@dataclass
class UserSession:
    """
    The signed-in user as reported by the auth collaborator.

    Attributes:
        id: User identifier (auth.users.id)
        email: Account email
        full_name: Display name from user metadata, if any
        access_token: Opaque JWT used for row-level security
    """
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    access_token: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.id)

    @property
    def display_name(self) -> str:
        return self.full_name or DEFAULT_USER_NAME

    @property
    def avatar_initial(self) -> str:
        for source in (self.full_name, self.email):
            if source:
                return source[0].upper()
        return DEFAULT_AVATAR_INITIAL

    @classmethod
    def from_user(cls, user: Dict[str, Any], access_token: Optional[str] = None) -> "UserSession":
        metadata = user.get("user_metadata") or {}
        return cls(
            id=user["id"],
            email=user.get("email"),
            full_name=metadata.get("full_name"),
            access_token=access_token,
            metadata=metadata,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "display_name": self.display_name,
            "avatar_initial": self.avatar_initial,
        }


class AuthClient(BaseClient):
    """Client for the Supabase GoTrue endpoints used by the app."""

    error_class = AuthError
    service_path = "/auth/v1"

    async def get_session(self, access_token: str) -> UserSession:
        """
        Resolve the user behind an access token.

        Raises:
            AuthError: Invalid or expired token
        """
        response = await self._request("GET", "/user", access_token=access_token)
        return UserSession.from_user(response.json(), access_token=access_token)

    async def sign_in_with_password(self, email: str, password: str) -> UserSession:
        """Exchange email and password for a session."""
        response = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        data = response.json()
        logger.info(f"User signed in: {data.get('user', {}).get('id')}")
        return UserSession.from_user(data["user"], access_token=data.get("access_token"))

    async def sign_up(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
    ) -> Optional[UserSession]:
        """
        Register a new account.

        Returns:
            The session when the project auto-confirms emails, otherwise None
            (the user must confirm the address first).
        """
        payload: Dict[str, Any] = {"email": email, "password": password}
        if full_name:
            payload["data"] = {"full_name": full_name}

        response = await self._request("POST", "/signup", json=payload)
        data = response.json()

        if data.get("access_token") and data.get("user"):
            return UserSession.from_user(data["user"], access_token=data["access_token"])
        return None

    async def sign_out(self, access_token: str) -> None:
        """Revoke the session behind the token."""
        await self._request("POST", "/logout", access_token=access_token)
        logger.info("User signed out")
