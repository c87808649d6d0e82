"""
Error hierarchy for smc-get.

Every error carries the identity of what went wrong as attributes and
formats a user-facing message, so callers can report failures precisely.
Filesystem errors are not wrapped; they propagate as OSError.
"""
from __future__ import annotations


class SmcGetError(Exception):
    """Base class for all smc-get errors."""


class NoSuchResourceError(SmcGetError):
    """
    A requested resource is not present in a repository.

    Attributes:
        kind: What was requested ("spec" or "package").
        identifier: The file name or package name that was looked up.
    """

    def __init__(self, kind: str, identifier: str, message: str | None = None) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(message or f"No such {kind}: '{identifier}'")


class NoSuchPackageError(NoSuchResourceError):
    """A package archive is not present in a repository."""

    def __init__(self, package_name: str, message: str | None = None) -> None:
        self.package_name = package_name
        super().__init__(
            "package",
            package_name,
            message or f"Package '{package_name}' not found",
        )


class PackageNotInstalledError(SmcGetError):
    """The package is not tracked by the repository's index."""

    def __init__(self, package_name: str) -> None:
        self.package_name = package_name
        super().__init__(f"Package '{package_name}' is not installed")


class InvalidSpecificationError(SmcGetError):
    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid package specification {path}: {detail}")


class InvalidPackageError(SmcGetError):
    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid package {path}: {detail}")


class DownloadError(SmcGetError):
    """A download was refused or kept failing after all attempts."""

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"Failed to download {url}: {detail}")
