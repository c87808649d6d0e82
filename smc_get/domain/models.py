from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Callable, List

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from smc_get.domain.errors import InvalidSpecificationError


SPEC_FILE_EXT = ".yml"
ARCHIVE_EXT = ".smcpak"

# Order matters: uninstall walks the categories in this order.
CONTENT_CATEGORIES = ("levels", "music", "graphics", "sounds", "worlds")

# Called with (overall percent, label of the unit in progress, unit percent).
ProgressCallback = Callable[[float, str, float], None]

DEFAULT_REPO_URL = "https://raw.github.com/Luiji/Secret-Maryo-Chronicles-Contributed-Levels/master/"


class PackageSpecification(BaseModel):
    """
    Metadata and file manifest of one level package.
    Persisted at: <REPO>/packages/<name>.yml

    The manifest lists are relative to the matching category directory and are
    the only files the repository associates with the package.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    title: str
    authors: List[str] = Field(min_length=1)
    difficulty: str
    description: str = ""

    levels: List[str] = Field(default_factory=list)
    music: List[str] = Field(default_factory=list)
    graphics: List[str] = Field(default_factory=list)
    sounds: List[str] = Field(default_factory=list)
    worlds: List[str] = Field(default_factory=list)

    @field_validator("levels", "music", "graphics", "sounds", "worlds")
    @classmethod
    def _check_relative_paths(cls, value: List[str]) -> List[str]:
        for entry in value:
            path = PurePosixPath(entry)
            if not entry or path.is_absolute() or ".." in path.parts:
                raise ValueError(f"manifest entry must be a relative path inside its category: {entry!r}")
        return value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageSpecification):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    @property
    def file_name(self) -> str:
        return f"{self.name}{SPEC_FILE_EXT}"

    @property
    def archive_name(self) -> str:
        return f"{self.name}{ARCHIVE_EXT}"

    def files_for(self, category: str) -> List[str]:
        """Manifest entries of one content category."""
        if category not in CONTENT_CATEGORIES:
            raise ValueError(f"Unknown content category: {category}")
        return list(getattr(self, category))

    def all_files(self) -> List[tuple[str, str]]:
        return [(category, f) for category in CONTENT_CATEGORIES for f in self.files_for(category)]

    @classmethod
    def from_file(cls, path: Path) -> PackageSpecification:
        """
        Decode a spec file. A file without a ``name`` key is named after
        its file stem.
        """
        path = Path(path)
        return cls.from_yaml(path.read_text(encoding="utf-8"), source=str(path), default_name=path.stem)

    @classmethod
    def from_yaml(cls, text: str, source: str = "<string>", default_name: str | None = None) -> PackageSpecification:
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise InvalidSpecificationError(source, f"invalid YAML: {e}") from e

        if not isinstance(raw, dict):
            raise InvalidSpecificationError(source, "expected a mapping at the top level")

        if default_name is not None:
            raw.setdefault("name", default_name)
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise InvalidSpecificationError(source, str(e)) from e

    def save(self, directory: Path) -> Path:
        """Write this spec as <directory>/<name>.yml and return the path."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / self.file_name
        target.write_text(
            yaml.safe_dump(self.model_dump(), sort_keys=False, allow_unicode=True),
            encoding="utf-8",
        )
        return target


class SmcGetConfig(BaseModel):
    """
    Runtime configuration. Built from environment variables by
    smc_get.core.dependencies.
    """

    data_directory: Path = Field(
        default_factory=lambda: Path.home() / ".smc-get",
        description="Root of the local repository; should be the SMC installation path.",
    )
    repo_url: str = Field(
        default=DEFAULT_REPO_URL,
        description="Base URL of the remote package repository.",
    )
    download_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout in seconds for a single HTTP request.",
    )
    download_attempts: int = Field(
        default=3,
        ge=1,
        description="How often a failing download is attempted before giving up.",
    )
