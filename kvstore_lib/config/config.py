"""Runtime configuration for the key-value store.

Settings come from two sources: an optional YAML file and the process
environment. Environment variables win over the file so a hosted run can
override a checked-in development config.
"""
from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional
import logging
import os

import yaml

logger = logging.getLogger(__name__)


class ENV_VARS:
    LOCAL_STORAGE_DIR = "APIFY_LOCAL_STORAGE_DIR"
    TOKEN = "APIFY_TOKEN"
    DEFAULT_KEY_VALUE_STORE_ID = "APIFY_DEFAULT_KEY_VALUE_STORE_ID"
    INPUT_KEY = "APIFY_INPUT_KEY"
    API_BASE_URL = "APIFY_API_BASE_URL"
    LOG_LEVEL = "APIFY_LOG_LEVEL"
    CONFIG_FILE = "KVSTORE_CONFIG"


DEFAULT_CONFIG_FILE = "kvstore.yml"
DEFAULT_API_BASE_URL = "https://api.apify.com"
DEFAULT_INPUT_KEY = "INPUT"
DEFAULT_LOCAL_STORE_ID = "default"

# config field -> environment variable
_ENV_MAP = {
    "local_storage_dir": ENV_VARS.LOCAL_STORAGE_DIR,
    "token": ENV_VARS.TOKEN,
    "default_store_id": ENV_VARS.DEFAULT_KEY_VALUE_STORE_ID,
    "input_key": ENV_VARS.INPUT_KEY,
    "api_base_url": ENV_VARS.API_BASE_URL,
    "log_level": ENV_VARS.LOG_LEVEL,
}


@dataclass
class StorageConfig:
    local_storage_dir: Optional[str] = None
    token: Optional[str] = None
    default_store_id: Optional[str] = None
    input_key: str = DEFAULT_INPUT_KEY
    api_base_url: str = DEFAULT_API_BASE_URL
    log_level: str = "WARNING"

    @property
    def uses_local_storage(self) -> bool:
        return bool(self.local_storage_dir)


def _read_config_file(path: Path) -> dict:
    try:
        with path.open("r", encoding="utf-8") as f:
            data: Any = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"invalid config file {path}: parse error") from e
    if not isinstance(data, dict):
        raise ValueError(f"invalid config file {path}: expected mapping")
    known = {f.name for f in fields(StorageConfig)}
    unknown = set(data) - known
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(sorted(unknown)))
    return {k: v for k, v in data.items() if k in known and v is not None}


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[str | Path] = None,
) -> StorageConfig:
    """Build a `StorageConfig` from a YAML file and the environment.

    The file is taken from `config_path`, else from `KVSTORE_CONFIG`, else
    `kvstore.yml` in the working directory; a missing file is not an error.
    Empty environment variables count as unset.
    """
    env = os.environ if environ is None else environ
    values: dict = {}

    path = Path(config_path or env.get(ENV_VARS.CONFIG_FILE) or DEFAULT_CONFIG_FILE)
    if path.exists():
        values.update(_read_config_file(path))
        logger.debug("Loaded storage config from %s", path)

    for field_name, env_name in _ENV_MAP.items():
        raw = env.get(env_name)
        if raw:
            values[field_name] = raw.strip()

    return StorageConfig(**values)
