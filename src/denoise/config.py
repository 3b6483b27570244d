"""Client configuration loader.

Loads settings from ~/.denoise/config.json, then applies environment
overrides (DENOISE_API_URL, DENOISE_TIMEOUT, DENOISE_STORAGE_PATH,
DENOISE_LOG_DIR).
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".denoise" / "config.json"
DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 10.0


@dataclass
class ClientConfig:
    """Configuration for the deNoise client.

    Attributes:
        base_url: Root URL of the deNoise HTTP API.
        timeout: Per-request timeout in seconds.
        storage_path: File holding the persisted identity.
        log_dir: Directory for the JSONL event log.
    """

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    storage_path: Path | None = None
    log_dir: Path | None = None

    def __post_init__(self) -> None:
        if self.storage_path is None:
            self.storage_path = Path.home() / ".denoise" / "denoise_user.json"

        if self.log_dir is None:
            self.log_dir = Path.home() / ".denoise" / "logs"

        self.base_url = self.base_url.rstrip("/")

        if self.timeout <= 0:
            raise ValueError("timeout must be positive")


def load_config(config_path: Path | None = None) -> ClientConfig:
    """Load ClientConfig from a JSON file and the environment.

    The config file should have this structure:
    ```json
    {
      "api": {"base_url": "https://denoise.example.com", "timeout": 20},
      "storage_path": "~/.denoise/denoise_user.json",
      "log_dir": "~/.denoise/logs"
    }
    ```

    Args:
        config_path: Path to config file. Uses DEFAULT_CONFIG_PATH if None.

    Returns:
        ClientConfig instance with loaded values.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    data: dict[str, Any] = {}

    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
    else:
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON in %s: %s. Using defaults.", path, e)
        except OSError as e:
            logger.warning("Cannot read %s: %s. Using defaults.", path, e)

    if not isinstance(data, dict):
        data = {}

    return _apply_env_overrides(_parse_config(data))


def _parse_config(data: dict[str, Any]) -> ClientConfig:
    """Parse config dictionary into ClientConfig."""
    api = data.get("api", {})
    if not isinstance(api, dict):
        api = {}

    base_url = api.get("base_url", DEFAULT_BASE_URL)
    if not isinstance(base_url, str) or not base_url:
        base_url = DEFAULT_BASE_URL

    timeout = api.get("timeout", DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        timeout = DEFAULT_TIMEOUT

    return ClientConfig(
        base_url=base_url,
        timeout=float(timeout),
        storage_path=_parse_path(data.get("storage_path")),
        log_dir=_parse_path(data.get("log_dir")),
    )


def _parse_path(value: Any) -> Path | None:
    if not isinstance(value, str) or not value:
        return None
    return Path(value).expanduser()


def _apply_env_overrides(config: ClientConfig) -> ClientConfig:
    """Environment variables win over the config file."""
    base_url = os.getenv("DENOISE_API_URL")
    if base_url:
        config.base_url = base_url.rstrip("/")

    timeout = os.getenv("DENOISE_TIMEOUT")
    if timeout:
        try:
            value = float(timeout)
        except ValueError:
            logger.warning("Ignoring invalid DENOISE_TIMEOUT=%r", timeout)
        else:
            if value > 0:
                config.timeout = value

    storage_path = os.getenv("DENOISE_STORAGE_PATH")
    if storage_path:
        config.storage_path = Path(storage_path).expanduser()

    log_dir = os.getenv("DENOISE_LOG_DIR")
    if log_dir:
        config.log_dir = Path(log_dir).expanduser()

    return config
