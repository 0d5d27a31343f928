"""imagepin - pin Dockerfile base images to their latest tag and digest."""

__version__ = "0.1.0"
