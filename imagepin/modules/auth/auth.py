"""
Registry authentication for a single image.

Provides RegistryAuth for all registry API calls with:
- One auth strategy picked per registry host (helper, basic, anonymous)
- Token exchange against the registry's /token endpoint
- Token cached for the lifetime of the instance
- Proper cleanup via invalidate()
"""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, Optional

import httpx

from imagepin.modules.auth.creds_helper import CredsHelper
from imagepin.modules.auth.docker_config import DockerConfig
from imagepin.modules.auth.hosts import token_endpoint
from imagepin.modules.errors import AuthError
from imagepin.modules.image import ImageReference

logger = logging.getLogger(__name__)

# Marks a token that was never fetched; None is a valid (anonymous) token.
_NOT_FETCHED = object()


class AuthStrategy(enum.Enum):
    CREDENTIAL_HELPER = "credential-helper"
    BASIC = "basic"
    ANONYMOUS = "anonymous"


@dataclass(frozen=True)
class AuthPlan:
    """How to authenticate against one registry host."""
    host: str
    strategy: AuthStrategy
    helper: Optional[str] = None
    basic_auth: Optional[str] = None

    @classmethod
    def for_host(cls, host: str, docker_config: DockerConfig) -> "AuthPlan":
        helper = docker_config.get_cred_helper(host)
        if helper is not None:
            return cls(host, AuthStrategy.CREDENTIAL_HELPER, helper=helper)
        basic_auth = docker_config.get_auth(host)
        if basic_auth is not None:
            return cls(host, AuthStrategy.BASIC, basic_auth=basic_auth)
        return cls(host, AuthStrategy.ANONYMOUS)


class RegistryAuth:
    """
    Centralized registry authentication for one image.

    Usage:
        auth = RegistryAuth(ImageReference.parse("nginx:1.27"), DockerConfig(), http)
        headers = await auth.auth_headers()
        # ... do work ...
        auth.invalidate()  # forget the token when done
    """

    def __init__(
        self,
        reference: ImageReference,
        docker_config: DockerConfig,
        http: httpx.AsyncClient,
    ):
        """
        Initialize auth for a specific image.

        Args:
            reference: Image whose repository the token is scoped to
            docker_config: Source of credential helpers and stored auths
            http: Client used for the token exchange
        """
        self.reference = reference
        self.docker_config = docker_config
        self.http = http
        self.host = reference.get_registry(use_default=True)
        self._plan: Optional[AuthPlan] = None
        self._token = _NOT_FETCHED

    @property
    def plan(self) -> AuthPlan:
        if self._plan is None:
            self._plan = AuthPlan.for_host(self.host, self.docker_config)
        return self._plan

    async def _fetch_token(self) -> Optional[str]:
        """
        Fetch a pull token according to the auth plan.

        Credential helper secrets are used as bearer tokens as-is. Otherwise
        the token endpoint is called, with Basic auth when stored
        credentials exist for the host.
        """
        plan = self.plan
        if plan.strategy is AuthStrategy.CREDENTIAL_HELPER:
            logger.debug("Using credential helper %s for %s", plan.helper, self.host)
            return await CredsHelper(plan.helper).get_secret(self.host)

        auth_host, service = token_endpoint(self.host)
        headers = {}
        if plan.strategy is AuthStrategy.BASIC:
            headers["Authorization"] = f"Basic {plan.basic_auth}"

        resp = await self.http.get(
            f"https://{auth_host}/token",
            params={
                "service": service,
                "scope": f"repository:{self.reference.repository_path()}:pull",
            },
            headers=headers,
        )
        if not resp.is_success:
            raise AuthError(auth_host, resp.status_code, resp.text)

        try:
            body = resp.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            raise AuthError(auth_host, resp.status_code, "token response is not a JSON object")
        token = body.get("token") or body.get("access_token")
        if not token:
            logger.warning("Auth endpoint %s returned no token, continuing anonymously", auth_host)
            return None
        return token

    async def get_token(self) -> Optional[str]:
        """Get token, fetching if not cached."""
        if self._token is _NOT_FETCHED:
            self._token = await self._fetch_token()
        return self._token

    async def auth_headers(self) -> Dict[str, str]:
        """Return the Authorization header for data calls, or {} when anonymous."""
        token = await self.get_token()
        if token is None:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def invalidate(self):
        """Forget the cached token so the next call authenticates again."""
        self._token = _NOT_FETCHED
