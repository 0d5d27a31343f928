from .registry_client import MANIFEST_TYPES, RegistryClient, http_client
