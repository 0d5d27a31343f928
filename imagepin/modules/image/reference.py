"""
Container image reference parsing.

Splits strings of the form [registry/][namespace/]name[:tag][@digest]
into their parts without applying any defaults, so that formatting a
parsed reference gives back the exact input. Defaults (docker.io,
library, latest) are only applied when a caller asks for them.
"""

from dataclasses import dataclass
from typing import Optional

from imagepin.modules.errors import MalformedReferenceError

DEFAULT_REGISTRY = "docker.io"
DEFAULT_NAMESPACE = "library"
DEFAULT_TAG = "latest"


def _is_registry(segment: str) -> bool:
    # registry hosts carry a domain dot or a port
    return "." in segment or ":" in segment


@dataclass(frozen=True)
class ImageReference:
    """
    Parsed image reference.

    Usage:
        ref = ImageReference.parse("ghcr.io/org/tool:1.2.3")
        ref.get_registry()                 # "ghcr.io"
        ref.format(include_digest=False)   # "ghcr.io/org/tool:1.2.3"
    """

    name: str
    registry: Optional[str] = None
    namespace: Optional[str] = None
    tag: Optional[str] = None
    digest: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "ImageReference":
        """
        Parse a reference string.

        Args:
            text: Reference such as "nginx", "library/nginx:1.27" or
                  "my-host.com/ns/img:tag@sha256:..."

        Returns:
            ImageReference with absent parts left as None

        Raises:
            MalformedReferenceError: If no image name can be derived
        """
        parts = text.split("/")
        name_tag_digest = parts.pop()

        name_tag, sep, digest = name_tag_digest.partition("@")
        name, tag_sep, tag = name_tag.partition(":")
        if not name:
            raise MalformedReferenceError(text)

        registry = None
        namespace = None
        if parts:
            if _is_registry(parts[0]):
                registry = parts.pop(0)
            if parts:
                namespace = "/".join(parts)

        return cls(
            name=name,
            registry=registry,
            namespace=namespace,
            tag=tag if tag_sep else None,
            digest=digest if sep else None,
        )

    def format(
        self,
        *,
        include_registry: bool = True,
        force_registry: bool = False,
        force_namespace: bool = False,
        include_tag: bool = True,
        force_tag: bool = False,
        include_digest: bool = True,
    ) -> str:
        """
        Serialize the reference as [registry/][namespace/]name[:tag][@digest].

        force_* flags fill in the default only when the part is absent.
        include_* flags set to False drop the part even when present.
        The namespace is always emitted when set.
        """
        parts = []
        if include_registry:
            if self.registry is not None:
                parts.append(self.registry)
            elif force_registry:
                parts.append(DEFAULT_REGISTRY)

        if self.namespace is not None:
            parts.append(self.namespace)
        elif force_namespace:
            parts.append(DEFAULT_NAMESPACE)

        parts.append(self.name)
        full_name = "/".join(parts)

        if include_tag:
            if self.tag is not None:
                full_name += f":{self.tag}"
            elif force_tag:
                full_name += f":{DEFAULT_TAG}"

        if include_digest and self.digest is not None:
            full_name += f"@{self.digest}"
        return full_name

    def __str__(self) -> str:
        return self.format()

    def get_name(self) -> str:
        return self.name

    def get_registry(self, use_default: bool = False) -> Optional[str]:
        if self.registry is None and use_default:
            return DEFAULT_REGISTRY
        return self.registry

    def get_namespace(self, use_default: bool = False) -> Optional[str]:
        if self.namespace is None and use_default:
            return DEFAULT_NAMESPACE
        return self.namespace

    def get_tag(self, use_default: bool = False) -> Optional[str]:
        if self.tag is None and use_default:
            return DEFAULT_TAG
        return self.tag

    def get_digest(self) -> Optional[str]:
        return self.digest

    def is_latest_tag(self) -> bool:
        return self.get_tag(use_default=True) == DEFAULT_TAG

    def repository_path(self) -> str:
        """Return "<namespace>/<name>" as used in v2 API paths and token scopes."""
        return f"{self.get_namespace(use_default=True)}/{self.name}"
