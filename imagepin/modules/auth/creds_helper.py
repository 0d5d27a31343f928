"""
Docker credential helper runner.

Credential helpers are external executables named docker-credential-<name>.
The registry host is written to stdin of `docker-credential-<name> get`
and the helper answers with {"ServerURL": ..., "Username": ..., "Secret": ...}.
"""

import asyncio
import json
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class CredsHelper:
    """Fetch registry secrets from a docker credential helper."""

    def __init__(self, name: str):
        self.name = name

    @property
    def executable(self) -> str:
        return f"docker-credential-{self.name}"

    async def get_secret(self, host: str) -> Optional[str]:
        """
        Ask the helper for the secret stored for host.

        Returns:
            The "Secret" value, or None when the helper is missing, fails,
            or prints something that is not a credentials object.
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                self.executable,
                "get",
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            logger.warning("Credential helper %s not found in PATH", self.executable)
            return None

        stdout, stderr = await proc.communicate(host.encode("utf-8"))
        if proc.returncode != 0:
            logger.warning(
                "Could not get credentials for %s from %s. Error: %s",
                host,
                self.name,
                stderr.decode("utf-8", errors="replace").strip(),
            )
            return None

        try:
            payload = json.loads(stdout)
        except ValueError:
            logger.warning("Credential helper %s returned invalid JSON for %s", self.name, host)
            return None
        if not isinstance(payload, dict):
            return None
        return payload.get("Secret")
