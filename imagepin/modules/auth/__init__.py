from .auth import AuthPlan, AuthStrategy, RegistryAuth
from .creds_helper import CredsHelper
from .docker_config import DockerConfig
from .hosts import DOCKER_HUB_HOSTS, api_host, token_endpoint
