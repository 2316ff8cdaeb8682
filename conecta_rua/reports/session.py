"""
Session header: who is signed in, and the login/logout affordances.

Credential handling belongs to the auth collaborator; this module only
forwards what the user typed and keeps the resulting session.
"""

import logging
from typing import Any, Dict, Optional

from conecta_rua.backend import AuthClient, UserSession
from conecta_rua.core.exceptions import AuthError
from conecta_rua.notifications import Notifier

logger = logging.getLogger(__name__)

LOGIN_LABEL = "Entrar"
LOGOUT_LABEL = "Sair"


async def resolve_session(auth: AuthClient, access_token: Optional[str]) -> Optional[UserSession]:
    """
    Current session for a token, None when signed out or expired.
    """
    if not access_token:
        return None
    try:
        return await auth.get_session(access_token)
    except AuthError as e:
        logger.info(f"Discarding session token: {e.message}")
        return None


class SessionHeader:
    """Header state: the user's identity or the login button."""

    def __init__(
        self,
        auth: AuthClient,
        notifier: Notifier,
        session: Optional[UserSession] = None,
    ):
        self.auth = auth
        self.notifier = notifier
        self.session = session
        self.show_auth_form = False

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None and self.session.is_authenticated

    def request_create_report(self) -> bool:
        """
        "Nova Denúncia" button.

        Returns:
            True when the creation dialog may open; otherwise the login form
            is shown instead
        """
        if not self.is_authenticated:
            self.show_auth_form = True
            return False
        return True

    async def sign_in(self, email: str, password: str) -> Optional[UserSession]:
        """Forward credentials to the auth collaborator."""
        if not email.strip() or not password:
            self.notifier.error("Preencha email e senha")
            return None

        try:
            self.session = await self.auth.sign_in_with_password(email.strip(), password)
        except AuthError as e:
            self.notifier.error(f"Erro ao entrar: {e.message}")
            return None

        self.show_auth_form = False
        self.notifier.success("Login realizado com sucesso!")
        return self.session

    async def sign_up(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
    ) -> Optional[UserSession]:
        """Create an account; the session exists only if no email confirmation is required."""
        if not email.strip() or not password:
            self.notifier.error("Preencha email e senha")
            return None

        try:
            session = await self.auth.sign_up(email.strip(), password, (full_name or "").strip() or None)
        except AuthError as e:
            self.notifier.error(f"Erro ao criar conta: {e.message}")
            return None

        if session is None:
            self.notifier.info("Conta criada! Verifique seu email para confirmar o cadastro.")
            return None

        self.session = session
        self.show_auth_form = False
        self.notifier.success("Conta criada com sucesso!")
        return session

    async def sign_out(self) -> None:
        if self.session is None:
            return
        try:
            if self.session.access_token:
                await self.auth.sign_out(self.session.access_token)
        except AuthError as e:
            # The token is dropped locally even if revocation failed
            logger.warning(f"Sign out failed upstream: {e.message}")
        self.session = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.is_authenticated:
            return {"authenticated": False, "login_label": LOGIN_LABEL, "user": None}
        return {
            "authenticated": True,
            "logout_label": LOGOUT_LABEL,
            "user": self.session.to_dict(),
        }
