"""Configuration management for the uploader CLI."""

import json
import os
import shutil
import tempfile
from pathlib import Path

from common.constants import CHUNK_SIZE_BYTES
from common.logging_config import get_logger

logger = get_logger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "uploader_host": os.environ.get("GIST_UPLOADER_HOST", "localhost"),
        "uploader_port": int(os.environ.get("GIST_UPLOADER_PORT", "8000")),
        "timeout": 30,
        "chunk_size_bytes": CHUNK_SIZE_BYTES,
        "inter_chunk_delay": 5,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.gistupload/config.json)
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
            self.config_path = Path(tempfile.gettempdir()) / '.gistupload' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Config file {self.config_path} unreadable ({e}); using defaults")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError as backup_error:
                    logger.warning(f"Could not back up config file: {backup_error}")
                return self.DEFAULT_CONFIG.copy()
        else:
            config = self.DEFAULT_CONFIG.copy()
            try:
                with open(self.config_path, 'w') as f:
                    json.dump(config, f, indent=2)
            except IOError as e:
                logger.warning(f"Could not write default config: {e}")
            return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not save config: {e}")

    def get_base_url(self) -> str:
        """
        Get upload service base URL.

        Returns:
            Base URL string (e.g., "http://localhost:8000")
        """
        host = self.data.get('uploader_host', 'localhost')
        port = self.data.get('uploader_port', 8000)
        return f"http://{host}:{port}"

    def get_timeout(self) -> int:
        """
        Get request timeout in seconds.

        Returns:
            Timeout value in seconds
        """
        return self.data.get('timeout', 30)

    def get_chunk_size(self) -> int:
        """
        Get the chunk ceiling used when splitting recordings.

        Returns:
            Chunk size in bytes
        """
        return int(self.data.get('chunk_size_bytes', CHUNK_SIZE_BYTES))

    def get_inter_chunk_delay(self) -> float:
        """
        Get the server's pause between pushes, used to size upload timeouts.

        Returns:
            Delay in seconds
        """
        return float(self.data.get('inter_chunk_delay', 5))
