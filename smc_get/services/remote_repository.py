"""
Read-only access to a package repository served over HTTP.

Expected layout below the repository URL:

    packages.lst             one package name per line
    specs/<name>.yml         package specifications
    packages/<name>.smcpak   package archives
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional, Union

import httpx

from smc_get.domain.errors import DownloadError, NoSuchPackageError, NoSuchResourceError
from smc_get.domain.models import ARCHIVE_EXT, PackageSpecification, ProgressCallback
from smc_get.domain.package import Package
from smc_get.storage.repository import Repository, target_name

logger = logging.getLogger(__name__)

SPECS_DIR = "specs"
PACKAGES_DIR = "packages"
PACKAGE_LIST_FILE = "packages.lst"


class RemoteRepository(Repository):
    def __init__(
        self,
        uri: str,
        client: Optional[httpx.Client] = None,
        timeout: float = 60.0,
        attempts: int = 3,
        retry_delay: float = 1.0,
    ):
        self.uri = uri if uri.endswith("/") else f"{uri}/"
        self._client = client or httpx.Client(follow_redirects=True, timeout=timeout)
        self.attempts = attempts
        self.retry_delay = retry_delay
        self._package_names: Optional[List[str]] = None

    def __repr__(self) -> str:
        return f"RemoteRepository({self.uri!r})"

    def __enter__(self) -> RemoteRepository:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def package_names(self) -> List[str]:
        """Names listed in the remote package list, fetched once."""
        if self._package_names is None:
            url = f"{self.uri}{PACKAGE_LIST_FILE}"
            try:
                response = self._client.get(url)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise DownloadError(url, str(e)) from e
            self._package_names = [line.strip() for line in response.text.splitlines() if line.strip()]
            logger.debug(f"{len(self._package_names)} package(s) listed in {url}")
        return list(self._package_names)

    def fetch_spec(self, spec_file: str, directory: Path = Path(".")) -> Path:
        url = f"{self.uri}{SPECS_DIR}/{spec_file}"
        missing = NoSuchResourceError(
            "spec",
            spec_file,
            f"Package specification '{spec_file}' not found in the remote repository '{self.uri}'",
        )
        return self._download(url, Path(directory) / spec_file, missing)

    def fetch_package(
        self,
        pkg_file: str,
        directory: Path = Path("."),
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Path:
        url = f"{self.uri}{PACKAGES_DIR}/{pkg_file}"
        missing = NoSuchPackageError(
            pkg_file.removesuffix(ARCHIVE_EXT),
            f"Package file '{pkg_file}' not found in the remote repository '{self.uri}'",
        )
        return self._download(url, Path(directory) / pkg_file, missing, progress_callback)

    def install(self, package: Package, progress_callback: Optional[ProgressCallback] = None) -> None:
        raise NotImplementedError("Packages cannot be installed into a remote repository")

    def uninstall(self, pkg_name: str, progress_callback: Optional[ProgressCallback] = None) -> None:
        raise NotImplementedError("Packages cannot be uninstalled from a remote repository")

    def contains(self, target: Union[Package, PackageSpecification, str]) -> bool:
        return target_name(target) in self.package_names

    def _download(
        self,
        url: str,
        target_path: Path,
        missing: NoSuchResourceError,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Path:
        """
        Stream ``url`` into ``target_path`` via a temporary ``.part`` file.

        A 404 raises ``missing`` and any other client error raises
        DownloadError right away; other failures are retried and finally
        raised as DownloadError.
        """
        target_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = target_path.with_name(f"{target_path.name}.part")
        label = target_path.name

        logger.info(f"Downloading {url}")
        for attempt in range(1, self.attempts + 1):
            try:
                with self._client.stream("GET", url) as response:
                    if response.status_code == httpx.codes.NOT_FOUND:
                        raise missing
                    if response.is_client_error:
                        raise DownloadError(url, f"HTTP {response.status_code}")
                    response.raise_for_status()

                    total_size = int(response.headers.get("content-length", 0))
                    downloaded = 0

                    with open(tmp_path, "wb") as f:
                        for chunk in response.iter_bytes():
                            f.write(chunk)
                            downloaded += len(chunk)
                            if progress_callback and total_size > 0:
                                percent = min(downloaded * 100.0 / total_size, 100.0)
                                progress_callback(percent, label, percent)
                break
            except httpx.HTTPError as e:
                tmp_path.unlink(missing_ok=True)
                if attempt < self.attempts:
                    logger.warning(f"Download failed (attempt {attempt}/{self.attempts}): {e}. Retrying...")
                    time.sleep(self.retry_delay * attempt)
                else:
                    raise DownloadError(url, str(e)) from e

        tmp_path.replace(target_path)
        if progress_callback:
            progress_callback(100.0, label, 100.0)
        logger.debug(f"Saved {url} to {target_path}")
        return target_path
