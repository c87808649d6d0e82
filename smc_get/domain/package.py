"""
Level package archives.

A package file ``<name>.smcpak`` is an xz-compressed tar archive with a
single top-level directory::

    <name>/<name>.yml     package specification
    <name>/levels/...     one sub-directory per content category
    <name>/music/...
    <name>/graphics/...
    <name>/sounds/...
    <name>/worlds/...
"""
from __future__ import annotations

import logging
import tarfile
from pathlib import Path, PurePosixPath
from typing import Optional

from smc_get.domain.errors import InvalidPackageError, InvalidSpecificationError
from smc_get.domain.models import (
    ARCHIVE_EXT,
    CONTENT_CATEGORIES,
    SPEC_FILE_EXT,
    PackageSpecification,
    ProgressCallback,
)

logger = logging.getLogger(__name__)


class Package:
    def __init__(self, path: Path):
        self.path = Path(path)
        if not self.path.is_file():
            raise InvalidPackageError(str(self.path), "file does not exist")
        self.name = self.path.name.removesuffix(ARCHIVE_EXT)
        self.spec = self._read_spec()

    def __repr__(self) -> str:
        return f"Package({str(self.path)!r})"

    def _open(self) -> tarfile.TarFile:
        try:
            return tarfile.open(self.path, "r:xz")
        except tarfile.TarError as e:
            raise InvalidPackageError(str(self.path), f"not an xz-compressed tar archive: {e}") from e

    def _read_spec(self) -> PackageSpecification:
        member_name = f"{self.name}/{self.name}{SPEC_FILE_EXT}"
        with self._open() as tar:
            try:
                member = tar.getmember(member_name)
            except KeyError:
                raise InvalidPackageError(str(self.path), f"missing specification {member_name}") from None
            fileobj = tar.extractfile(member)
            if fileobj is None:
                raise InvalidPackageError(str(self.path), f"{member_name} is not a regular file")
            try:
                text = fileobj.read().decode("utf-8")
            except UnicodeDecodeError as e:
                raise InvalidPackageError(str(self.path), f"{member_name} is not valid UTF-8: {e}") from e
            regular_files = {PurePosixPath(m.name) for m in tar.getmembers() if m.isfile()}

        try:
            spec = PackageSpecification.from_yaml(text, source=f"{self.path}:{member_name}", default_name=self.name)
        except InvalidSpecificationError as e:
            raise InvalidPackageError(str(self.path), e.detail) from e

        if spec.name != self.name:
            raise InvalidPackageError(
                str(self.path),
                f"specification names package '{spec.name}', archive is named '{self.name}'",
            )

        # Uninstall deletes exactly these files, so each must be shipped.
        for category, filename in spec.all_files():
            if PurePosixPath(self.name, category, filename) not in regular_files:
                raise InvalidPackageError(str(self.path), f"listed file not in archive: {category}/{filename}")
        return spec

    def _check_member(self, member: tarfile.TarInfo) -> None:
        path = PurePosixPath(member.name)
        if path.is_absolute() or ".." in path.parts or path.parts[:1] != (self.name,):
            raise InvalidPackageError(str(self.path), f"member outside of '{self.name}/': {member.name}")
        if not (member.isfile() or member.isdir()):
            raise InvalidPackageError(str(self.path), f"unsupported member type: {member.name}")

    def decompress(self, directory: Path, progress_callback: Optional[ProgressCallback] = None) -> Path:
        """
        Extract the archive into ``directory`` and return ``directory``; the
        package contents end up in ``directory / self.name``.

        The callback, if given, is called once per extracted member.
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        with self._open() as tar:
            members = tar.getmembers()
            for member in members:
                self._check_member(member)

            total = len(members)
            for i, member in enumerate(members, start=1):
                tar.extract(member, directory, filter="data")
                if progress_callback:
                    progress_callback(i * 100.0 / total, member.name, 100.0)

        logger.debug(f"Decompressed {self.path} into {directory}")
        return directory

    @classmethod
    def create(cls, source_dir: Path, directory: Path) -> Package:
        """
        Build ``<directory>/<name>.smcpak`` from a source tree laid out like an
        unpacked package, where ``name`` is the source directory's name.

        Exactly the files listed in the specification are packed.
        """
        source_dir = Path(source_dir)
        directory = Path(directory)
        name = source_dir.name

        spec_path = source_dir / f"{name}{SPEC_FILE_EXT}"
        if not spec_path.is_file():
            raise InvalidPackageError(str(source_dir), f"missing specification {spec_path.name}")
        spec = PackageSpecification.from_file(spec_path)
        if spec.name != name:
            raise InvalidPackageError(str(source_dir), f"specification names package '{spec.name}'")

        for category, filename in spec.all_files():
            if not (source_dir / category / filename).is_file():
                raise InvalidPackageError(str(source_dir), f"listed file not found: {category}/{filename}")

        directory.mkdir(parents=True, exist_ok=True)
        target = directory / spec.archive_name
        with tarfile.open(target, "w:xz") as tar:
            tar.addfile(_directory_entry(name))
            tar.add(spec_path, arcname=f"{name}/{spec.file_name}")
            for category in CONTENT_CATEGORIES:
                tar.addfile(_directory_entry(f"{name}/{category}"))
                for filename in spec.files_for(category):
                    tar.add(source_dir / category / filename, arcname=f"{name}/{category}/{filename}")

        logger.info(f"Created package {target}")
        return cls(target)


def _directory_entry(arcname: str) -> tarfile.TarInfo:
    info = tarfile.TarInfo(arcname)
    info.type = tarfile.DIRTYPE
    info.mode = 0o755
    return info
