"""
Runtime configuration shared by the server entry point and the client.
"""

import os
from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).parent / ".env"
if env_path.exists():
    load_dotenv(env_path, override=False)
else:
    # Try loading from current directory as fallback
    load_dotenv(override=False)


def _user_config_dir() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    if os.name == "nt" and os.getenv("APPDATA"):
        return Path(os.environ["APPDATA"])
    return Path.home() / ".config"


class Config:
    """Client configuration, read from the environment on each access."""

    HTTP_TIMEOUT_SECONDS: float = 10.0

    @staticmethod
    def server_url() -> str:
        return os.getenv("SERVER_URL", "").strip()

    @staticmethod
    def session_path() -> Path:
        override = os.getenv("PKEEPER_SESSION_PATH")
        if override:
            return Path(override)
        return _user_config_dir() / "pkeeper" / "session.json"


def resolve_http_addr(server_url: str) -> tuple[str, int]:
    """Host and port to bind for a server URL; defaults to 0.0.0.0:8080."""
    parsed = urlparse(server_url.strip())
    if not parsed.hostname:
        return "0.0.0.0", 8080
    if parsed.port is not None:
        return parsed.hostname, parsed.port
    return parsed.hostname, 443 if parsed.scheme == "https" else 80
