"""
Exception hierarchy for the dependency age tool.

Only LockfileReadError and MalformedResolutionError abort a run. Registry and
cache errors are recovered where they happen and only reduce the amount of
age information in the report.
"""


class DependencyAgeError(Exception):
    """Base exception for all dependency age errors."""


class LockfileReadError(DependencyAgeError):
    """Raised when the lockfile is missing, unreadable or cannot be decoded."""


class MalformedResolutionError(DependencyAgeError):
    """Raised when a resolution string has no name/version separator."""

    def __init__(self, resolution: str) -> None:
        super().__init__(f"Unexpected dependency name and version string '{resolution}'")
        self.resolution = resolution


class RegistryFetchError(DependencyAgeError):
    """Raised when package metadata cannot be fetched or decoded."""

    def __init__(self, package: str, reason: str) -> None:
        super().__init__(f"Could not fetch registry metadata for {package}: {reason}")
        self.package = package
        self.reason = reason


class CacheReadError(DependencyAgeError):
    """Raised when a cache entry cannot be read or decoded."""


class CacheWriteError(DependencyAgeError):
    """Raised when a cache entry cannot be written."""
