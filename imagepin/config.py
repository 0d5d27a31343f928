"""
Runtime settings for imagepin.

Values come from the environment so CI jobs can point the tool at a
different docker config without extra flags:

- DOCKER_CONFIG_PATH: explicit path to a docker config.json
- DOCKER_CONFIG: docker config directory (config.json inside it)
- IMAGEPIN_HTTP_TIMEOUT: registry HTTP timeout in seconds
"""

import os
from pathlib import Path

DEFAULT_DOCKER_CONFIG = Path.home() / ".docker" / "config.json"
DEFAULT_HTTP_TIMEOUT = 30.0


def docker_config_path() -> Path:
    """Return the docker config.json path from the environment or the default."""
    explicit = os.environ.get("DOCKER_CONFIG_PATH")
    if explicit:
        return Path(explicit).expanduser()
    config_dir = os.environ.get("DOCKER_CONFIG")
    if config_dir:
        return Path(config_dir).expanduser() / "config.json"
    return DEFAULT_DOCKER_CONFIG


def http_timeout() -> float:
    raw = os.environ.get("IMAGEPIN_HTTP_TIMEOUT")
    if not raw:
        return DEFAULT_HTTP_TIMEOUT
    try:
        return max(float(raw), 1.0)
    except ValueError:
        return DEFAULT_HTTP_TIMEOUT
