"""Shared pytest fixtures for smc-get tests."""

from pathlib import Path
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from smc_get.domain.models import PackageSpecification
from smc_get.domain.package import Package
from smc_get.services.remote_repository import RemoteRepository
from smc_get.storage.local_repository import LocalRepository

DEFAULT_FILES = {
    "levels": {"plumber.smclvl": "<level>plumber</level>"},
    "music": {"plumber-theme.ogg": "OggS..."},
}


@pytest.fixture
def make_package(tmp_path: Path) -> Callable[..., Package]:
    """Build a real .smcpak archive from a map of category -> {path: content}."""

    def _make(
        name: str = "plumber-adventure",
        files: Optional[Dict[str, Dict[str, str]]] = None,
        title: str = "Plumber Adventure",
    ) -> Package:
        files = DEFAULT_FILES if files is None else files
        source = tmp_path / "src" / name
        for category, entries in files.items():
            for relative, content in entries.items():
                path = source / category / relative
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")

        spec = PackageSpecification(
            name=name,
            title=title,
            authors=["Luiji", "Quintus"],
            difficulty="medium",
            description="Jump on things.",
            **{category: sorted(entries) for category, entries in files.items()},
        )
        spec.save(source)
        return Package.create(source, tmp_path / "archives")

    return _make


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    return tmp_path / "smc"


@pytest.fixture
def local_repo(repo_root: Path) -> LocalRepository:
    return LocalRepository(repo_root)


@pytest.fixture
def make_spec() -> Callable[..., PackageSpecification]:
    def _make(name: str = "plumber-adventure", **overrides) -> PackageSpecification:
        fields = {
            "name": name,
            "title": "Plumber Adventure",
            "authors": ["Luiji"],
            "difficulty": "easy",
            "description": "Jump on things.",
        }
        fields.update(overrides)
        return PackageSpecification(**fields)

    return _make


REMOTE_URL = "https://levels.example.org/smc/"


@pytest.fixture
def make_remote() -> Callable[..., RemoteRepository]:
    """A RemoteRepository over httpx.MockTransport serving ``files``.

    ``files`` is keyed by path below REMOTE_URL. ``failures`` maps a path to
    how many requests for it answer 500 before it is served; ``statuses`` maps
    a path to a fixed error status it always answers with. Every request is
    appended to ``requests`` when given.
    """

    def _make(
        files: Dict[str, bytes],
        requests: Optional[List[httpx.Request]] = None,
        failures: Optional[Dict[str, int]] = None,
        statuses: Optional[Dict[str, int]] = None,
        **kwargs,
    ) -> RemoteRepository:
        pending = dict(failures or {})

        def handler(request: httpx.Request) -> httpx.Response:
            if requests is not None:
                requests.append(request)
            path = request.url.path.removeprefix("/smc/")
            if pending.get(path, 0) > 0:
                pending[path] -= 1
                return httpx.Response(500)
            if statuses and path in statuses:
                return httpx.Response(statuses[path])
            if path in files:
                return httpx.Response(200, content=files[path])
            return httpx.Response(404)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        kwargs.setdefault("retry_delay", 0)
        return RemoteRepository(REMOTE_URL, client=client, **kwargs)

    return _make
