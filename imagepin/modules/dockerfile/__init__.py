from .dockerfile import Dockerfile, Instruction
from .updater import DockerfileUpdater, ImageUpdate, pinned_name
