"""
Dockerfile image discovery.

Finds the images a Dockerfile pulls from a registry:
- FROM <image> [AS <alias>] (with optional --platform style flags)
- COPY --from=<image> ...

Build stage aliases are local, so they are dropped from the result, as are
references a registry cannot answer for (scratch, stage indexes, build args).
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set

_FROM_RE = re.compile(
    r"^[ \t]*FROM[ \t]+(?:--\S+[ \t]+)*(?P<image>(?!--)\S+)(?:[ \t]+AS[ \t]+(?P<alias>\S+))?[ \t\r]*$",
    re.IGNORECASE | re.MULTILINE,
)
_COPY_RE = re.compile(
    r"^[ \t]*COPY[ \t]+.*?--from=(?P<image>\S+).*$",
    re.IGNORECASE | re.MULTILINE,
)

RESERVED_IMAGES = {"scratch"}


@dataclass(frozen=True)
class Instruction:
    """One matched instruction line and where the image sits inside it."""
    text: str
    offset: int  # line position in the Dockerfile contents
    start: int   # image span inside text
    end: int

    @property
    def image(self) -> str:
        return self.text[self.start:self.end]

    def rewrite(self, new_image: str) -> str:
        """Return the line with only the image reference replaced."""
        return self.text[:self.start] + new_image + self.text[self.end:]


def _instruction(match: re.Match) -> Instruction:
    line_start = match.start()
    return Instruction(
        text=match.group(0),
        offset=line_start,
        start=match.start("image") - line_start,
        end=match.end("image") - line_start,
    )


def _is_resolvable(image: str) -> bool:
    if "$" in image or image.isdigit():
        return False
    return image.lower() not in RESERVED_IMAGES


class Dockerfile:
    """
    A Dockerfile on disk.

    Contents are read once and cached; write() replaces the cache too.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._contents: Optional[str] = None

    def read(self) -> str:
        if self._contents is None:
            # newline="" keeps CRLF line endings intact on rewrite
            with open(self.path, "r", encoding="utf-8", newline="") as f:
                self._contents = f.read()
        return self._contents

    def write(self, contents: str):
        with open(self.path, "w", encoding="utf-8", newline="") as f:
            f.write(contents)
        self._contents = contents

    def images(self) -> Dict[str, List[Instruction]]:
        """
        Map each registry image reference to the instructions using it.

        Returns:
            {raw reference: [Instruction, ...]} in document order
        """
        contents = self.read()
        images: Dict[str, List[Instruction]] = {}
        aliases: Set[str] = set()

        for match in _FROM_RE.finditer(contents):
            alias = match.group("alias")
            if alias:
                aliases.add(alias.lower())
            image = match.group("image")
            if _is_resolvable(image):
                images.setdefault(image, []).append(_instruction(match))

        # FROM <alias> refers to an earlier stage, not a registry image
        for image in list(images):
            if image.lower() in aliases:
                del images[image]

        for match in _COPY_RE.finditer(contents):
            image = match.group("image")
            if image.lower() in aliases or not _is_resolvable(image):
                continue
            images.setdefault(image, []).append(_instruction(match))

        return images
