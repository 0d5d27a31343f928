"""Registry host routing, including the Docker Hub aliases."""

from typing import Tuple

DOCKER_HUB_HOSTS = ("docker.io", "registry.docker.io", "registry-1.docker.io")
DOCKER_HUB_AUTH_HOST = "auth.docker.io"
DOCKER_HUB_SERVICE = "registry.docker.io"
DOCKER_HUB_API_HOST = "index.docker.io"


def is_docker_hub(host: str) -> bool:
    return host in DOCKER_HUB_HOSTS


def token_endpoint(host: str) -> Tuple[str, str]:
    """Return (auth_host, service) for the token exchange against host."""
    if is_docker_hub(host):
        return DOCKER_HUB_AUTH_HOST, DOCKER_HUB_SERVICE
    return host, host


def api_host(host: str) -> str:
    """Return the host serving the v2 data API for host."""
    if is_docker_hub(host):
        return DOCKER_HUB_API_HOST
    return host
