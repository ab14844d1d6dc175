"""Configuration management for the GSC client."""

import json
import os
import shutil
from pathlib import Path
from typing import Optional

from gsc.logging_config import get_logger

logger = get_logger(__name__)

CONFIG_ENV_VAR = 'GSC_CONFIG'
ENDPOINT_ENV_VAR = 'GSC_ENDPOINT'


def default_config_path() -> Path:
    """
    Location of the config file: $GSC_CONFIG, else ~/.gsc/config.json.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path.home() / '.gsc' / 'config.json'


class Config:
    """Manages client configuration and credentials stored in a JSON file."""

    DEFAULT_CONFIG = {
        "endpoint": os.environ.get(ENDPOINT_ENV_VAR, "http://localhost:9090"),
        "timeout": 30,
        "overwrite": "ask",
        "json_output": False,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.gsc/config.json)
        """
        self.config_path = config_path
        self.on_behalf: Optional[str] = None
        self.json_override: Optional[bool] = None
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                backup_path = self.config_path.with_suffix('.json.bak')
                logger.warning(
                    f"Could not parse config file {self.config_path} ({e}); "
                    f"moved it to {backup_path} and using defaults"
                )
                shutil.copy(self.config_path, backup_path)
                config = self.DEFAULT_CONFIG.copy()
                self._write(config)
                return config
        else:
            config = self.DEFAULT_CONFIG.copy()
            self._write(config)
            return config

    def _write(self, data: dict) -> None:
        with open(self.config_path, 'w') as f:
            json.dump(data, f, indent=2)
        os.chmod(self.config_path, 0o600)

    def save(self) -> None:
        """Save current configuration to file."""
        self._write(self.data)

    def get_endpoint(self) -> str:
        """
        Get server base URL.

        Returns:
            Base URL string without trailing slash (e.g., "http://localhost:9090")
        """
        return self.data.get('endpoint', 'http://localhost:9090').rstrip('/')

    def get_timeout(self) -> int:
        return self.data.get('timeout', 30)

    def get_username(self) -> str:
        """
        Get the logged-in username.

        Returns:
            Username, or empty string when nobody is logged in
        """
        return self.data.get('username', '')

    def set_username(self, username: str) -> None:
        self.data['username'] = username
        self.save()

    def get_cookie(self) -> Optional[tuple[str, str]]:
        """
        Get the stored session cookie.

        Returns:
            (key, value) pair or None if not set
        """
        cookie = self.data.get('cookie', '')
        key, sep, value = cookie.partition('=')
        if not sep or not key:
            return None
        return key, value

    def set_cookie(self, key: str, value: str) -> None:
        """
        Store a session cookie received from the server and save to file.

        Args:
            key: Cookie name
            value: Cookie value
        """
        self.data['cookie'] = f"{key}={value}"
        self.save()

    def clear_credentials(self) -> None:
        """Forget username and cookie."""
        self.data.pop('cookie', None)
        self.data.pop('username', None)
        self.save()

    def get_overwrite_policy(self) -> str:
        return self.data.get('overwrite', 'ask')

    def json_output(self) -> bool:
        if self.json_override is not None:
            return self.json_override
        return bool(self.data.get('json_output', False))

    def select_user(self, user: Optional[str] = None) -> str:
        """
        Pick the user a command acts on.

        Args:
            user: Explicit user, if any

        Returns:
            user, else the -u user, else the logged-in user (may be empty)
        """
        return user or self.on_behalf or self.get_username()
