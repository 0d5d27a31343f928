"""
Registry v2 API client.

Talks to the data plane of one registry for one image:
- tags/list (following Link pagination)
- manifests/<tag>, digested locally as sha256 over the raw body

A 404 is an expected answer (unknown repo or tag) and is returned as an
empty result; any other failure status raises RegistryError.
"""

import hashlib
import logging
from typing import List, Optional

import httpx

from imagepin.config import http_timeout
from imagepin.modules.auth import DockerConfig, RegistryAuth, api_host
from imagepin.modules.errors import RegistryError
from imagepin.modules.image import ImageReference

logger = logging.getLogger(__name__)

# Manifest media types to request (in order of preference)
MANIFEST_TYPES = ", ".join([
    "application/vnd.docker.distribution.manifest.list.v2+json",
    "application/vnd.oci.image.index.v1+json",
    "application/vnd.docker.distribution.manifest.v2+json",
    "application/vnd.oci.image.manifest.v1+json",
])


def http_client(
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create the HTTP client used for token and registry calls.

    Redirects are followed, since registries behind a proxy or serving
    manifests from a CDN answer with 301/307.
    """
    return httpx.AsyncClient(
        timeout=timeout if timeout is not None else http_timeout(),
        follow_redirects=True,
        transport=transport,
    )


class RegistryClient:
    """
    Query one registry for one image.

    Usage:
        async with RegistryClient(ImageReference.parse("nginx:1.27")) as client:
            tags = await client.list_tags()
            digest = await client.get_digest("1.27.3")
    """

    def __init__(
        self,
        reference: ImageReference,
        docker_config: Optional[DockerConfig] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.reference = reference
        self._owns_http = http is None
        self.http = http if http is not None else http_client()
        self.auth = RegistryAuth(reference, docker_config or DockerConfig(), self.http)

    async def __aenter__(self) -> "RegistryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Drop the cached token and close the HTTP client if we created it."""
        self.auth.invalidate()
        if self._owns_http:
            await self.http.aclose()

    @property
    def base_url(self) -> str:
        host = api_host(self.reference.get_registry(use_default=True))
        return f"https://{host}/v2/{self.reference.repository_path()}"

    async def _get(self, url: str, accept: Optional[str] = None) -> Optional[httpx.Response]:
        """GET an API url with auth; None on 404, RegistryError on other failures."""
        headers = await self.auth.auth_headers()
        if accept:
            headers["Accept"] = accept
        resp = await self.http.get(url, headers=headers)
        if resp.status_code == 404:
            logger.debug("404 status returned while calling %s", url)
            return None
        if not resp.is_success:
            raise RegistryError(url, resp.status_code, resp.text)
        return resp

    async def list_tags(self) -> List[str]:
        """
        List every tag of the repository.

        Returns:
            Tag names in registry order, [] when the repository is unknown
        """
        tags: List[str] = []
        seen = set()
        url: Optional[str] = f"{self.base_url}/tags/list"
        while url and url not in seen:
            seen.add(url)
            resp = await self._get(url)
            if resp is None:
                break
            try:
                body = resp.json()
            except ValueError:
                body = None
            if not isinstance(body, dict):
                raise RegistryError(url, resp.status_code, "tags/list response is not a JSON object")
            tags.extend(body.get("tags") or [])
            next_link = resp.links.get("next", {}).get("url")
            url = str(resp.url.join(next_link)) if next_link else None
        if url:
            logger.warning("Stopping tag pagination for %s: next link %s was already fetched", self.reference, url)
        return tags

    async def get_digest(self, tag: str) -> Optional[str]:
        """
        Compute the manifest digest of tag.

        The digest is sha256 over the exact response bytes, which is how the
        registry itself content-addresses the manifest.

        Returns:
            "sha256:<hex>", or None when the tag does not exist
        """
        resp = await self._get(f"{self.base_url}/manifests/{tag}", accept=MANIFEST_TYPES)
        if resp is None:
            return None
        return f"sha256:{hashlib.sha256(resp.content).hexdigest()}"
