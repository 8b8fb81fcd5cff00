"""Detected tool versions with sentinels for unchecked and failed detection."""

import functools
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar


class VersionKind(str, Enum):
    """Whether a version holds real components or is a sentinel."""

    CHECKED = "checked"
    UNKNOWN = "unknown"  # Never checked
    INVALID = "invalid"  # Check failed or is in progress


_VERSION_RE = re.compile(r"(\d+(?:\.\d+){0,3})")
_PREFIX_RE = re.compile(r"^\s*git\s+version\s+", re.IGNORECASE)

# major, minor, revision, patch
_COMPONENT_COUNT = 4


@functools.total_ordering
@dataclass(frozen=True)
class ToolVersion:
    """A git version such as 1.6.0.2.

    Checked versions are totally ordered. The UNKNOWN and INVALID sentinels
    compare equal only to themselves and cannot be ordered.
    """

    components: tuple[int, ...] = (0, 0, 0, 0)
    kind: VersionKind = VersionKind.CHECKED
    raw: str = field(default="", compare=False)

    UNKNOWN: ClassVar["ToolVersion"]
    INVALID: ClassVar["ToolVersion"]

    @classmethod
    def parse(cls, text: str) -> "ToolVersion":
        """Parse the tool's self-reported version string.

        Args:
            text: Output of `git --version`, e.g. "git version 2.39.2 (Apple Git-143)"

        Returns:
            Checked ToolVersion

        Raises:
            ValueError: If the text contains no version number
        """
        stripped = _PREFIX_RE.sub("", text.strip())
        match = _VERSION_RE.search(stripped)
        if not match:
            raise ValueError(f"Not a git version: {text!r}")

        numbers = [int(part) for part in match.group(1).split(".")]
        numbers.extend([0] * (_COMPONENT_COUNT - len(numbers)))
        return cls(components=tuple(numbers), raw=text.strip())

    @property
    def major(self) -> int:
        return self.components[0]

    @property
    def minor(self) -> int:
        return self.components[1]

    @property
    def revision(self) -> int:
        return self.components[2]

    @property
    def patch(self) -> int:
        return self.components[3]

    @property
    def is_checked(self) -> bool:
        """Whether this is a real detected version rather than a sentinel."""
        return self.kind == VersionKind.CHECKED

    def is_supported(self, minimum: "ToolVersion | None" = None) -> bool:
        """Check the version against the minimum supported version.

        Sentinels are never supported.
        """
        if not self.is_checked:
            return False
        return self >= (minimum or MIN_SUPPORTED_VERSION)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ToolVersion):
            return NotImplemented
        if not (self.is_checked and other.is_checked):
            raise TypeError(f"Cannot order {self} and {other}: only checked versions are ordered")
        return self.components < other.components

    def __str__(self) -> str:
        if not self.is_checked:
            return self.kind.value
        if self.patch:
            return ".".join(str(c) for c in self.components)
        return ".".join(str(c) for c in self.components[:3])


ToolVersion.UNKNOWN = ToolVersion(kind=VersionKind.UNKNOWN)
ToolVersion.INVALID = ToolVersion(kind=VersionKind.INVALID)

# Oldest git release the bridge supports
MIN_SUPPORTED_VERSION = ToolVersion(components=(1, 6, 0, 0))
