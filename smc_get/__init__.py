"""
Package manager for Secret Maryo Chronicles level packages.

This package is responsible for:
* Describing packages (specification + content manifest) and their archives.
* Keeping the local repository inside an SMC installation in sync with an
  in-memory index of installed packages.
* Fetching specs and archives from a remote repository over HTTP.
"""

from smc_get.domain.errors import (
    DownloadError,
    InvalidPackageError,
    InvalidSpecificationError,
    NoSuchPackageError,
    NoSuchResourceError,
    PackageNotInstalledError,
    SmcGetError,
)
from smc_get.domain.models import CONTENT_CATEGORIES, PackageSpecification, SmcGetConfig
from smc_get.domain.package import Package
from smc_get.services.installer import PackageInstaller
from smc_get.services.remote_repository import RemoteRepository
from smc_get.storage.local_repository import LocalRepository
from smc_get.storage.repository import Repository

__version__ = "0.1.0"

__all__ = [
    "CONTENT_CATEGORIES",
    "DownloadError",
    "InvalidPackageError",
    "InvalidSpecificationError",
    "LocalRepository",
    "NoSuchPackageError",
    "NoSuchResourceError",
    "Package",
    "PackageInstaller",
    "PackageNotInstalledError",
    "PackageSpecification",
    "RemoteRepository",
    "Repository",
    "SmcGetError",
    "SmcGetConfig",
]
