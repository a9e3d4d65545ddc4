from .config import (
    DEFAULT_API_BASE_URL,
    DEFAULT_INPUT_KEY,
    DEFAULT_LOCAL_STORE_ID,
    ENV_VARS,
    StorageConfig,
    load_config,
)

__all__ = [
    "DEFAULT_API_BASE_URL",
    "DEFAULT_INPUT_KEY",
    "DEFAULT_LOCAL_STORE_ID",
    "ENV_VARS",
    "StorageConfig",
    "load_config",
]
