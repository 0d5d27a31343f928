# CLI argument parsing for imagepin

import argparse
from pathlib import Path

from imagepin import __version__


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="imagepin",
        description="Pin Dockerfile base images to their latest tag and digest.",
    )
    p.add_argument(
        "dockerfiles",
        nargs="+",
        type=Path,
        metavar="DOCKERFILE",
        help="Dockerfile(s) to update in place",
    )
    p.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Show the updates without writing any file",
    )
    p.add_argument(
        "--docker-config", "-c",
        dest="docker_config",
        type=Path,
        default=None,
        help="Path to docker config.json (default: $DOCKER_CONFIG_PATH or ~/.docker/config.json)",
    )
    p.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Registry HTTP timeout in seconds (default: $IMAGEPIN_HTTP_TIMEOUT or 30)",
    )
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging",
    )
    verbosity.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only show warnings and errors",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return p.parse_args(argv)
