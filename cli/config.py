"""Configuration management for the MiCloud drive CLI."""

import json
import os
import shutil
from pathlib import Path
from typing import Optional

from common.constants import BASE_URI, ROOT_FOLDER_ID


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "base_url": os.environ.get("MICLOUD_BASE_URL", BASE_URI),
        "timeout": 30,
        "upload_workers": 1,
        "default_parent_id": ROOT_FOLDER_ID,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.micloud/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            import tempfile
            self.config_path = Path(tempfile.gettempdir()) / '.micloud' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError):
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError:
                    pass
                return self.DEFAULT_CONFIG.copy()
        else:
            config = self.DEFAULT_CONFIG.copy()
            try:
                with open(self.config_path, 'w') as f:
                    json.dump(config, f, indent=2)
            except IOError:
                pass
            return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError:
            pass

    def get_credentials(self) -> Optional[tuple[str, str]]:
        """
        Get stored account id and service token.

        Returns:
            Tuple of (user_id, service_token) or None if not set
        """
        user_id = self.data.get('user_id')
        service_token = self.data.get('service_token')
        if not user_id or not service_token:
            return None
        return user_id, service_token

    def set_credentials(self, user_id: str, service_token: str) -> None:
        """
        Set account id and service token and save to file.

        Args:
            user_id: Xiaomi account id
            service_token: Service token issued for the drive service
        """
        self.data['user_id'] = user_id
        self.data['service_token'] = service_token
        self.save()

    def get_base_url(self) -> str:
        """
        Get drive service base URL.

        Returns:
            Base URL string (e.g., "https://i.mi.com")
        """
        return self.data.get('base_url', BASE_URI).rstrip('/')

    def get_timeout(self) -> int:
        """
        Get request timeout in seconds.

        Returns:
            Timeout value in seconds
        """
        return self.data.get('timeout', 30)

    def get_upload_workers(self) -> int:
        """
        Get the number of concurrent block uploads.

        Returns:
            Worker count (1 means sequential)
        """
        return max(1, int(self.data.get('upload_workers', 1)))

    def get_default_parent_id(self) -> str:
        """
        Get the folder uploads go to when none is given.

        Returns:
            Remote folder id
        """
        return str(self.data.get('default_parent_id', ROOT_FOLDER_ID))
