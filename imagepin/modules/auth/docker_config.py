"""
Docker client config lookups.

Reads ~/.docker/config.json (or the configured override) once and answers
per-registry questions: which credential helper to use, and which stored
base64 basic-auth value to send to the token endpoint.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Set

from imagepin.config import docker_config_path

logger = logging.getLogger(__name__)


class DockerConfig:
    """
    Lazily loaded docker config.json.

    A missing or broken file is not an error: it is logged and treated as
    an empty config, so lookups simply return None.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else docker_config_path()
        self._config: Optional[dict] = None
        self._bad_sections: Set[str] = set()

    def _read_config(self) -> dict:
        """Parse the config file on first use and cache the result."""
        if self._config is None:
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.warning("Could not read docker config file at %s. Reason: %s", self.path, e)
                data = {}
            if not isinstance(data, dict):
                logger.warning("Ignoring docker config file at %s: top level is not an object", self.path)
                data = {}
            self._config = data
        return self._config

    def _section(self, key: str) -> dict:
        section = self._read_config().get(key) or {}
        if not isinstance(section, dict):
            if key not in self._bad_sections:
                self._bad_sections.add(key)
                logger.warning("Ignoring %r in docker config file at %s: not an object", key, self.path)
            return {}
        return section

    def get_cred_helper(self, host: str) -> Optional[str]:
        """Return the credential helper name configured for host, if any."""
        helper = self._section("credHelpers").get(host)
        if not isinstance(helper, str):
            return None
        return helper or None

    def get_auth(self, host: str) -> Optional[str]:
        """Return the stored base64 "user:password" value for host, if any."""
        entry = self._section("auths").get(host)
        if not isinstance(entry, dict):
            return None
        return entry.get("auth") or None
