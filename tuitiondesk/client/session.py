"""
Client-side login session: the bearer token and the signed-in user.

The session is an explicit object handed to the API client. When a path is
given it is hydrated from that JSON file on construction and written back on
every save.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class Session:
    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else None
        self.token: str | None = None
        self.user: dict | None = None
        self.load()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def load(self) -> None:
        if not self.path or not self.path.exists():
            return
        try:
            stored = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable session file %s", self.path)
            return
        self.token = stored.get("token")
        self.user = stored.get("user")

    def save(self, token: str, user: dict | None) -> None:
        self.token = token
        self.user = user
        if self.path:
            self.path.write_text(json.dumps({"token": token, "user": user}), encoding="utf-8")

    def clear(self) -> None:
        self.token = None
        self.user = None
        if self.path:
            self.path.unlink(missing_ok=True)
