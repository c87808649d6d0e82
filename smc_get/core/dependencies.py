from pathlib import Path
from typing import Any, Dict, Optional
import os

from smc_get.domain.models import SmcGetConfig
from smc_get.services.installer import PackageInstaller
from smc_get.services.remote_repository import RemoteRepository
from smc_get.storage.local_repository import LocalRepository

DATA_ROOT_ENV_VAR = "SMC_GET_DATA_DIR"
REPO_URL_ENV_VAR = "SMC_GET_REPO_URL"
DOWNLOAD_TIMEOUT_ENV_VAR = "SMC_GET_DOWNLOAD_TIMEOUT"
DOWNLOAD_ATTEMPTS_ENV_VAR = "SMC_GET_DOWNLOAD_ATTEMPTS"

# Config field -> environment variable overriding it. Unset or empty
# variables leave the SmcGetConfig default in place.
_ENV_OVERRIDES = {
    "data_directory": DATA_ROOT_ENV_VAR,
    "repo_url": REPO_URL_ENV_VAR,
    "download_timeout": DOWNLOAD_TIMEOUT_ENV_VAR,
    "download_attempts": DOWNLOAD_ATTEMPTS_ENV_VAR,
}

_config: Optional[SmcGetConfig] = None
_local_repository: Optional[LocalRepository] = None
_remote_repository: Optional[RemoteRepository] = None
_package_installer: Optional[PackageInstaller] = None

def get_config() -> SmcGetConfig:
    global _config
    if _config is None:
        overrides: Dict[str, Any] = {}
        for field, env_var in _ENV_OVERRIDES.items():
            value = os.environ.get(env_var)
            if value:
                overrides[field] = value
        config = SmcGetConfig(**overrides)
        _config = config.model_copy(update={"data_directory": config.data_directory.expanduser()})
    return _config

def get_data_dir() -> Path:
    d = get_config().data_directory
    d.mkdir(parents=True, exist_ok=True)
    return d

def get_local_repository() -> LocalRepository:
    global _local_repository
    if _local_repository is None:
        _local_repository = LocalRepository(get_data_dir())
    return _local_repository

def get_remote_repository() -> RemoteRepository:
    global _remote_repository
    if _remote_repository is None:
        config = get_config()
        _remote_repository = RemoteRepository(
            config.repo_url,
            timeout=config.download_timeout,
            attempts=config.download_attempts,
        )
    return _remote_repository

def get_package_installer() -> PackageInstaller:
    global _package_installer
    if _package_installer is None:
        _package_installer = PackageInstaller(get_local_repository(), get_remote_repository())
    return _package_installer
