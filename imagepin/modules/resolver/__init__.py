from .resolver import ResolvedImage, VersionResolver
from .semver import SemVer
