from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from smc_get.domain.models import PackageSpecification, ProgressCallback
from smc_get.domain.package import Package


class Repository(ABC):
    """
    Abstract base class for package stores, local or remote.
    """

    @abstractmethod
    def fetch_spec(self, spec_file: str, directory: Path = Path(".")) -> Path:
        """
        Place the spec file ``spec_file`` (e.g. "foo.yml") into ``directory``
        and return its path. Raises NoSuchResourceError if it is absent.
        """
        pass

    @abstractmethod
    def fetch_package(
        self,
        pkg_file: str,
        directory: Path = Path("."),
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Path:
        """
        Place the archive ``pkg_file`` (e.g. "foo.smcpak") into ``directory``
        and return its path. Raises NoSuchPackageError if it is absent.
        """
        pass

    @abstractmethod
    def install(self, package: Package, progress_callback: Optional[ProgressCallback] = None) -> None:
        """Install a package into this repository."""
        pass

    @abstractmethod
    def uninstall(self, pkg_name: str, progress_callback: Optional[ProgressCallback] = None) -> None:
        """Remove an installed package by name."""
        pass

    @abstractmethod
    def contains(self, target: Union[Package, PackageSpecification, str]) -> bool:
        """Whether a package with the same name is present."""
        pass

    def contain(self, target: Union[Package, PackageSpecification, str]) -> bool:
        return self.contains(target)

    def __contains__(self, target: object) -> bool:
        if not isinstance(target, (Package, PackageSpecification, str)):
            return False
        return self.contains(target)


def target_name(target: Union[Package, PackageSpecification, str]) -> str:
    """Normalize a membership target to a package name."""
    if isinstance(target, Package):
        return target.spec.name
    if isinstance(target, PackageSpecification):
        return target.name
    return target
