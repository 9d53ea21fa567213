"""Semantic version parsing and ordering."""

import re
from dataclasses import dataclass, field

from meshwarden.core.exceptions import VersionParseError

_VERSION_PATTERN = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)(?:[-+](.+))?")


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """A major.minor.patch version.

    The suffix (pre-release or build metadata) is kept for display only and never
    takes part in equality, hashing or ordering.
    """

    major: int
    minor: int
    patch: int
    suffix: str = field(default="", compare=False)

    @classmethod
    def parse(cls, version: str) -> "SemanticVersion":
        """Parse a version string such as "1.2.3" or "1.2.3-distroless".

        Args:
            version: Version string

        Returns:
            SemanticVersion instance

        Raises:
            VersionParseError: If the string is not major.minor.patch[-suffix]
        """
        if not isinstance(version, str):
            raise VersionParseError(str(version), "not a string")

        match = _VERSION_PATTERN.fullmatch(version)
        if not match:
            raise VersionParseError(version)

        major, minor, patch, suffix = match.groups()
        return cls(int(major), int(minor), int(patch), suffix or "")

    def compare(self, other: "SemanticVersion") -> int:
        """Compare with another version.

        Returns:
            1 if self is greater, 0 if equal, -1 if lower
        """
        if self > other:
            return 1
        if self == other:
            return 0
        return -1

    def within_one_minor(self, other: "SemanticVersion") -> bool:
        """Whether both versions share a major and differ by at most one minor."""
        return self.major == other.major and abs(self.minor - other.minor) <= 1

    @property
    def major_minor_patch(self) -> str:
        """Version without the suffix."""
        return f"{self.major}.{self.minor}.{self.patch}"

    def __str__(self) -> str:
        if self.suffix:
            return f"{self.major_minor_patch}-{self.suffix}"
        return self.major_minor_patch


def version_from_image(image: str) -> str | None:
    """Extract the version tag from a container image.

    Args:
        image: Container image (e.g., "istio/proxyv2:1.20.0-distroless")

    Returns:
        Version string including any suffix, or None if the tag is not a version
    """
    # Match patterns like:
    # - istio/proxyv2:1.20.0
    # - docker.io/istio/proxyv2:1.20.0-distroless
    # - localhost:5000/istio/proxyv2:1.20.0
    match = re.search(r":([0-9]+\.[0-9]+\.[0-9]+(?:[-+][\w.-]+)?)$", image)
    if match:
        return match.group(1)
    return None
