#  imagepin main CLI
#  Pins FROM / COPY --from images of every Dockerfile given on the command line
import asyncio
import logging
import sys

import httpx
from rich.console import Console
from rich.logging import RichHandler

from imagepin.modules.auth import DockerConfig
from imagepin.modules.cli import parse_args
from imagepin.modules.dockerfile import DockerfileUpdater
from imagepin.modules.errors import ImagePinError

console = Console(highlight=False, soft_wrap=True)
logger = logging.getLogger("imagepin")


def setup_logging(verbose: bool = False, quiet: bool = False):
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    # keep request lines out of the default output
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


async def update_path(path, docker_config: DockerConfig, args) -> bool:
    """Pin one Dockerfile; returns False when it could not be processed."""
    updater = DockerfileUpdater(path, docker_config=docker_config, timeout=args.timeout)
    try:
        updates = await updater.update(dry_run=args.dry_run)
    except (ImagePinError, httpx.HTTPError, OSError, ValueError) as e:
        console.print(f"[!] {path}: {e}", style="red", markup=False)
        logger.debug("Failed to update %s", path, exc_info=True)
        return False

    if not updates:
        console.print(f"[*] {path}: up to date", markup=False)
        return True

    verb = "would update" if args.dry_run else "updated"
    console.print(f"[*] {path}: {verb} {len(updates)} image(s)", markup=False)
    for update in updates:
        console.print(f"    {update.old} -> {update.new}", markup=False)
    return True


async def run(args) -> int:
    docker_config = DockerConfig(args.docker_config)
    failed = []
    # every path is its own unit of work; one failure does not stop the rest
    for path in args.dockerfiles:
        if not await update_path(path, docker_config, args):
            failed.append(path)

    if failed:
        console.print(
            f"\n[!] {len(failed)} of {len(args.dockerfiles)} Dockerfile(s) failed: "
            + ", ".join(str(p) for p in failed),
            style="red",
            markup=False,
        )
        return 1
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
