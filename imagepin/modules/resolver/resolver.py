"""
Latest tag and digest resolution.

Floating tags (latest, stable, bookworm, ...) keep their tag and only get
their current digest. Semantic version tags advance to the highest patch
release of the same major.minor and prerelease family, so
1.2.3-bookworm can move to 1.2.4-bookworm but never to 1.3.0-bookworm,
1.2.4-bullseye or a plain 1.2.4.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from imagepin.modules.api import RegistryClient
from imagepin.modules.image import ImageReference
from imagepin.modules.resolver.semver import SemVer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedImage:
    """Tag to pin and its manifest digest (None when the registry had none)."""
    tag: str
    digest: Optional[str]


class VersionResolver:
    """Decide which tag and digest an image reference should be pinned to."""

    def __init__(self, reference: ImageReference, client: RegistryClient):
        self.reference = reference
        self.client = client

    async def resolve(self) -> ResolvedImage:
        tag = self.reference.get_tag(use_default=True)
        version = SemVer.parse(tag)
        if version is None:
            return ResolvedImage(tag=tag, digest=await self.client.get_digest(tag))

        if version.build:
            logger.info("Not checking tag %s for updates as it has a build part", tag)
            return ResolvedImage(tag=tag, digest=await self.client.get_digest(tag))

        latest_tag = await self._latest_in_family(tag, version)
        return ResolvedImage(tag=latest_tag, digest=await self.client.get_digest(latest_tag))

    async def _latest_in_family(self, tag: str, version: SemVer) -> str:
        # start from the current tag so we never move backwards
        latest_tag, latest = tag, version
        for candidate_tag in await self.client.list_tags():
            candidate = SemVer.parse(candidate_tag)
            if candidate is None or not version.same_family(candidate):
                continue
            if candidate > latest:
                latest_tag, latest = candidate_tag, candidate
        if latest_tag != tag:
            logger.debug("%s: %s -> %s", self.reference, tag, latest_tag)
        return latest_tag
