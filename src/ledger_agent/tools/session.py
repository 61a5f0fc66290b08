"""Authentication state shared by every handler that calls the accounting API."""

from dataclasses import dataclass

import structlog

from ledger_agent.tools.errors import AuthRequiredError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Session:
    """Credentials of the logged-in accounting user."""

    user: str | None = None
    password: str | None = None
    company_id: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.user and self.password and self.company_id)


class SessionStore:
    """Single-slot session holder.

    The store is only written by the login and logout operations. Because
    ``Session`` is immutable, both writes replace the whole slot at once.
    """

    def __init__(self) -> None:
        self._session = Session()

    @property
    def session(self) -> Session:
        return self._session

    def is_authenticated(self) -> bool:
        return self._session.is_complete

    def login(self, user: str, password: str, company_id: str) -> None:
        """Overwrite the current session. Call only after upstream login succeeded."""
        self._session = Session(user=user, password=password, company_id=company_id)
        logger.info("session_saved", user=user, company_id=company_id)

    def logout(self) -> None:
        self._session = Session()
        logger.info("session_cleared")

    def build_auth_headers(self) -> dict[str, str]:
        """Get the accounting API headers for the current session.

        Raises:
            AuthRequiredError: If no session is present.
        """
        session = self._session
        if not session.is_complete:
            raise AuthRequiredError()
        return {
            "Accept": "application/json",
            "X-COMPANY": session.company_id or "",
            "X-USER": session.user or "",
            "X-PASSWORD": session.password or "",
        }
