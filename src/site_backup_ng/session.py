"""The logged-in user's session.

Logging in is handled elsewhere; this only reads the session file that
login leaves behind and hands out the user id and token.
"""

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """No usable login session."""


@dataclass(frozen=True)
class Session:
    """Current user context passed explicitly to the command logic.

    Attributes:
        user_id: UUID of the logged-in user
        token: Bearer token for API calls
        expires_at: Unix time the token expires, if known
    """

    user_id: str
    token: str
    expires_at: Optional[float] = None

    @property
    def expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= time.time()


def load_session(path: str | Path) -> Session:
    """Read the session saved at login.

    Args:
        path: Session file path (user "~" is expanded)

    Returns:
        The session

    Raises:
        SessionError: If the file is missing, malformed, or expired
    """
    path = Path(path).expanduser()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise SessionError(f"You are not logged in (no session at {path})") from None
    except OSError as e:
        raise SessionError(f"Cannot read session file: {e}") from e
    except ValueError as e:
        raise SessionError(f"Session file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise SessionError(f"Session file {path} is malformed")

    user_id = data.get("user_id") or data.get("user_uuid")
    token = data.get("session") or data.get("token")
    if not user_id or not token:
        raise SessionError(f"Session file {path} lacks a user id or token")

    expires_at = data.get("expires_at")
    if expires_at is not None and not isinstance(expires_at, (int, float)):
        raise SessionError(f"Session file {path} has an invalid expires_at")
    session = Session(
        user_id=str(user_id),
        token=str(token),
        expires_at=float(expires_at) if expires_at is not None else None,
    )
    if session.expired:
        raise SessionError("Your session has expired; please log in again")

    logger.debug("Using session for user %s", session.user_id)
    return session
