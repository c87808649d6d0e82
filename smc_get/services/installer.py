"""
Install packages from a remote repository into the local one.
"""
from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Optional

from smc_get.domain.errors import NoSuchPackageError
from smc_get.domain.models import ARCHIVE_EXT, SPEC_FILE_EXT, PackageSpecification, ProgressCallback
from smc_get.domain.package import Package
from smc_get.services.remote_repository import RemoteRepository
from smc_get.storage.local_repository import LocalRepository

logger = logging.getLogger(__name__)


class PackageInstaller:
    def __init__(self, local: LocalRepository, remote: RemoteRepository):
        self.local = local
        self.remote = remote

    def package_installed(self, pkg_name: str) -> bool:
        return self.local.contains(pkg_name)

    def install(
        self,
        pkg_name: str,
        progress_callback: Optional[ProgressCallback] = None,
        reinstall: bool = False,
    ) -> bool:
        """
        Install ``pkg_name``. Returns False without touching anything when it
        is already installed and ``reinstall`` is not set.

        The archive is taken from the local cache when present, otherwise it
        is downloaded from the remote repository.
        """
        installed = self.package_installed(pkg_name)
        if installed and not reinstall:
            logger.info(f"{pkg_name} is already installed, nothing to do")
            return False

        pkg_file = f"{pkg_name}{ARCHIVE_EXT}"
        with tempfile.TemporaryDirectory(prefix="smc-get-") as tmp:
            try:
                path = self.local.fetch_package(pkg_file, Path(tmp), progress_callback)
                logger.debug(f"Using cached archive for {pkg_name}")
            except NoSuchPackageError:
                path = self.remote.fetch_package(pkg_file, Path(tmp), progress_callback)

            package = Package(path)
            if installed:
                logger.info(f"Reinstalling {pkg_name}")
                self.local.uninstall(pkg_name)
            self.local.install(package, progress_callback)
        return True

    def uninstall(self, pkg_name: str, progress_callback: Optional[ProgressCallback] = None) -> None:
        self.local.uninstall(pkg_name, progress_callback)

    def getinfo(self, pkg_name: str, force_remote: bool = False) -> PackageSpecification:
        """
        Spec of ``pkg_name``: the installed one, unless the package is not
        installed or ``force_remote`` asks for the remote copy.
        """
        if self.package_installed(pkg_name) and not force_remote:
            return self.local.get_spec(pkg_name)

        with tempfile.TemporaryDirectory(prefix="smc-get-") as tmp:
            path = self.remote.fetch_spec(f"{pkg_name}{SPEC_FILE_EXT}", Path(tmp))
            return PackageSpecification.from_file(path)
