"""
Dockerfile pinning.

Resolves every registry image in a Dockerfile to its latest tag and digest
and rewrites the matching instruction lines in place. Only the image span
of each matched line changes; everything else in the file is left as is.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import httpx

from imagepin.config import http_timeout
from imagepin.modules.api import RegistryClient, http_client
from imagepin.modules.auth import DockerConfig
from imagepin.modules.dockerfile.dockerfile import Dockerfile, Instruction
from imagepin.modules.image import ImageReference
from imagepin.modules.resolver import ResolvedImage, VersionResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageUpdate:
    """A reference that resolves to a different pinned reference."""
    old: str
    new: str
    instructions: Tuple[Instruction, ...]


def pinned_name(reference: ImageReference, resolved: ResolvedImage) -> str:
    """
    Build the pinned reference for a resolution result.

    A missing digest keeps whatever digest the reference already had.
    """
    name = reference.format(include_tag=False, include_digest=False)
    name += f":{resolved.tag}"
    digest = resolved.digest or reference.get_digest()
    if digest:
        name += f"@{digest}"
    return name


class DockerfileUpdater:
    """
    Pin the images of one Dockerfile.

    Usage:
        updater = DockerfileUpdater("Dockerfile")
        updates = await updater.update()
    """

    def __init__(
        self,
        dockerfile,
        docker_config: Optional[DockerConfig] = None,
        http: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.dockerfile = dockerfile if isinstance(dockerfile, Dockerfile) else Dockerfile(dockerfile)
        self.docker_config = docker_config or DockerConfig()
        self.http = http
        self.timeout = timeout if timeout is not None else http_timeout()

    async def latest_image_name(self, image_name: str, http: httpx.AsyncClient) -> str:
        """Resolve one raw reference to its pinned form."""
        reference = ImageReference.parse(image_name)
        # each resolution gets its own client, and so its own token cache
        async with RegistryClient(reference, self.docker_config, http) as client:
            resolved = await VersionResolver(reference, client).resolve()
        return pinned_name(reference, resolved)

    async def _plan(self, http: httpx.AsyncClient) -> List[ImageUpdate]:
        images = self.dockerfile.images()
        names = list(images)
        latest = await asyncio.gather(
            *(self.latest_image_name(name, http) for name in names),
            return_exceptions=True,
        )
        for result in latest:
            if isinstance(result, BaseException):
                raise result

        updates = []
        for name, new_name in zip(names, latest):
            if name == new_name:
                logger.debug("%s is up to date", name)
                continue
            updates.append(ImageUpdate(old=name, new=new_name, instructions=tuple(images[name])))
        return updates

    async def plan(self) -> List[ImageUpdate]:
        """Resolve every image and return the references that would change."""
        if self.http is not None:
            return await self._plan(self.http)
        async with http_client(self.timeout) as http:
            return await self._plan(http)

    def apply(self, updates: List[ImageUpdate]) -> str:
        """Return the Dockerfile contents with updates applied."""
        contents = self.dockerfile.read()
        edits = []
        for update in updates:
            for instruction in update.instructions:
                edits.append((instruction.offset, instruction.text, instruction.rewrite(update.new)))

        # splice from the end so earlier offsets stay valid
        for offset, old, new in sorted(edits, key=lambda edit: edit[0], reverse=True):
            end = offset + len(old)
            if contents[offset:end] != old:
                raise ValueError(f"Instruction {old!r} not found at offset {offset}")
            contents = contents[:offset] + new + contents[end:]
        return contents

    async def update(self, dry_run: bool = False) -> List[ImageUpdate]:
        """
        Pin all images and write the Dockerfile back.

        Args:
            dry_run: Resolve and report, but leave the file untouched

        Returns:
            The updates that were (or, for a dry run, would be) applied
        """
        updates = await self.plan()
        if updates and not dry_run:
            self.dockerfile.write(self.apply(updates))
        return updates
