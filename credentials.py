import logging
from pathlib import Path

import yaml
from werkzeug.security import check_password_hash, generate_password_hash

logger = logging.getLogger(__name__)

USERNAME_TAKEN = "Username already exists. Choose another."
USERNAME_REQUIRED = "Please enter a username."
PASSWORD_REQUIRED = "Please enter a password."


class CredentialStore:
    """Username to password-hash mapping kept in a single YAML file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        with open(self.path, encoding="utf-8") as f:
            users = yaml.safe_load(f)
        return users or {}

    def _save(self, users: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(users, f, default_flow_style=False)

    def user_exists(self, username: str) -> bool:
        return username in self.load()

    def verify(self, username: str, password: str) -> bool:
        hashed = self.load().get(username)
        if hashed is None:
            return False
        try:
            return check_password_hash(hashed, password)
        except ValueError:
            logger.warning(f"Unreadable password hash for {username!r}")
            return False

    def create(self, username: str, password: str) -> str | None:
        """Add a user, or return the message explaining why not."""
        users = self.load()
        if username in users:
            return USERNAME_TAKEN
        if not username.strip():
            return USERNAME_REQUIRED
        if not password.strip():
            return PASSWORD_REQUIRED
        users[username] = generate_password_hash(password)
        self._save(users)
        logger.info(f"Registered user {username}")
        return None
