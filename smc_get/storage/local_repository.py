from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Union

from smc_get.domain.errors import (
    InvalidSpecificationError,
    NoSuchPackageError,
    NoSuchResourceError,
    PackageNotInstalledError,
)
from smc_get.domain.fs_utils import copy_directory_contents, prune_empty_directories
from smc_get.domain.models import (
    ARCHIVE_EXT,
    CONTENT_CATEGORIES,
    SPEC_FILE_EXT,
    PackageSpecification,
    ProgressCallback,
)
from smc_get.domain.package import Package
from smc_get.storage.repository import Repository, target_name

logger = logging.getLogger(__name__)

# On-disk layout relative to the repository root. These names are shared with
# existing SMC installations and must not change.
SPECS_DIR = Path("packages")
CACHE_DIR = Path("cache")
CONTRIB_LEVELS_DIR = Path("levels")  # SMC does not find levels in sub-directories
CONTRIB_MUSIC_DIR = Path("music") / "contrib-music"
CONTRIB_GRAPHICS_DIR = Path("pixmaps") / "contrib-graphics"
CONTRIB_SOUNDS_DIR = Path("sounds") / "contrib-sounds"
CONTRIB_WORLDS_DIR = Path("world")  # SMC does not find worlds in sub-directories

CATEGORY_DIRS: Dict[str, Path] = {
    "levels": CONTRIB_LEVELS_DIR,
    "music": CONTRIB_MUSIC_DIR,
    "graphics": CONTRIB_GRAPHICS_DIR,
    "sounds": CONTRIB_SOUNDS_DIR,
    "worlds": CONTRIB_WORLDS_DIR,
}


class LocalRepository(Repository):
    """
    The package store inside an SMC installation.

    The in-memory index is built from the specs directory once, at
    construction. Afterwards only install() and uninstall() change it, each
    together with the files on disk, so it always answers "is X installed".
    Concurrent use of one root by several instances is not supported.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.specs_dir = self.path / SPECS_DIR
        self.cache_dir = self.path / CACHE_DIR
        self.levels_dir = self.path / CONTRIB_LEVELS_DIR
        self.music_dir = self.path / CONTRIB_MUSIC_DIR
        self.graphics_dir = self.path / CONTRIB_GRAPHICS_DIR
        self.sounds_dir = self.path / CONTRIB_SOUNDS_DIR
        self.worlds_dir = self.path / CONTRIB_WORLDS_DIR

        for directory in [self.specs_dir, self.cache_dir, *self.category_dirs()]:
            directory.mkdir(parents=True, exist_ok=True)

        self._package_specs: Dict[str, PackageSpecification] = {}
        self._load_specs_from_disk()

    def __repr__(self) -> str:
        return f"LocalRepository({str(self.path)!r})"

    @property
    def package_specs(self) -> List[PackageSpecification]:
        """Specs of all installed packages, in installation order."""
        return list(self._package_specs.values())

    def category_dir(self, category: str) -> Path:
        try:
            return self.path / CATEGORY_DIRS[category]
        except KeyError:
            raise ValueError(f"Unknown content category: {category}") from None

    def category_dirs(self) -> List[Path]:
        return [self.category_dir(category) for category in CONTENT_CATEGORIES]

    def get_spec(self, pkg_name: str) -> PackageSpecification:
        spec = self._package_specs.get(pkg_name)
        if spec is None:
            raise PackageNotInstalledError(pkg_name)
        return spec

    def _load_specs_from_disk(self) -> None:
        for spec_path in sorted(self.specs_dir.iterdir()):
            if spec_path.suffix != SPEC_FILE_EXT or not spec_path.is_file():
                continue
            try:
                spec = PackageSpecification.from_file(spec_path)
            except (InvalidSpecificationError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unreadable package specification {spec_path}: {e}")
                continue
            # Uninstall removes <name>.yml, so any other file name would outlive it.
            if spec.name != spec_path.stem:
                logger.warning(f"Skipping {spec_path}: it specifies package '{spec.name}'")
                continue
            self._package_specs[spec.name] = spec
        logger.debug(f"Loaded {len(self._package_specs)} package specifications from {self.specs_dir}")

    def fetch_spec(self, spec_file: str, directory: Path = Path(".")) -> Path:
        directory = Path(directory)

        spec_file_path = self.specs_dir / spec_file
        if not spec_file_path.is_file():
            raise NoSuchResourceError(
                "spec",
                spec_file,
                f"Package specification '{spec_file}' not found in the local repository '{self.path}'",
            )

        directory.mkdir(parents=True, exist_ok=True)
        shutil.copy2(spec_file_path, directory)
        return directory / spec_file

    def fetch_package(
        self,
        pkg_file: str,
        directory: Path = Path("."),
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Path:
        directory = Path(directory)

        pkg_file_path = self.cache_dir / pkg_file
        if not pkg_file_path.is_file():
            raise NoSuchPackageError(
                pkg_file.removesuffix(ARCHIVE_EXT),
                f"Package file '{pkg_file}' not found in this repository's cache",
            )

        directory.mkdir(parents=True, exist_ok=True)
        shutil.copy2(pkg_file_path, directory)
        if progress_callback:
            progress_callback(100.0, pkg_file, 100.0)
        return directory / pkg_file

    def install(self, package: Package, progress_callback: Optional[ProgressCallback] = None) -> None:
        """
        Copy a package's files into the category directories and record it.

        The steps run in order (spec, content, cache, index) and are not
        undone if a later one fails.
        """
        spec = package.spec
        logger.info(f"Installing {spec.name} into {self.path}")

        with tempfile.TemporaryDirectory(prefix="smc-get-") as tmp:
            unpacked = package.decompress(Path(tmp), progress_callback) / spec.name

            spec.save(self.specs_dir)

            for category in CONTENT_CATEGORIES:
                copied = copy_directory_contents(unpacked / category, self.category_dir(category))
                logger.debug(f"Copied {copied} {category} file(s) of {spec.name}")

            cached = self.cache_dir / spec.archive_name
            if not (cached.exists() and cached.samefile(package.path)):
                shutil.copy2(package.path, cached)

        self._package_specs[spec.name] = spec
        logger.info(f"Installed {spec.name}")

    def uninstall(self, pkg_name: str, progress_callback: Optional[ProgressCallback] = None) -> None:
        """
        Delete an installed package's files and forget it.

        Raises PackageNotInstalledError if the name is not indexed. A file
        listed in the spec but missing on disk aborts with FileNotFoundError.
        """
        spec = self.get_spec(pkg_name)
        logger.info(f"Uninstalling {pkg_name} from {self.path}")

        for i, category in enumerate(CONTENT_CATEGORIES, start=1):
            contrib_dir = self.category_dir(category)
            for filename in spec.files_for(category):
                (contrib_dir / filename).unlink()

            pruned = prune_empty_directories(contrib_dir)
            if pruned:
                logger.debug(f"Pruned {pruned} empty directories below {contrib_dir}")

            if progress_callback:
                progress_callback(i * 100.0 / len(CONTENT_CATEGORIES), category, 100.0)

        # Leave nothing a fresh index build could pick up again.
        (self.cache_dir / spec.archive_name).unlink(missing_ok=True)
        (self.specs_dir / spec.file_name).unlink(missing_ok=True)

        del self._package_specs[spec.name]
        logger.info(f"Uninstalled {pkg_name}")

    def contains(self, target: Union[Package, PackageSpecification, str]) -> bool:
        return target_name(target) in self._package_specs
