from __future__ import annotations
import logging
from typing import Optional

from kvstore_lib.config import StorageConfig, load_config


def configure_logging(config: Optional[StorageConfig] = None) -> logging.Logger:
    """Configure root logging for processes using the key-value store.

    The level comes from `config.log_level` (env `APIFY_LOG_LEVEL` or the
    YAML config); unknown level names fall back to WARNING. Returns a
    module logger for the caller.
    """
    cfg = config or load_config()
    level = getattr(logging, str(cfg.log_level).upper(), None)
    if not isinstance(level, int):
        level = logging.WARNING

    # Reconfigure root handlers to use the selected level and format
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s [%(name)s]: %(message)s')
    logger = logging.getLogger(__name__)

    # Keep HTTP client internals quiet by default
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logger.debug("Log level set to %s", logging.getLevelName(level))

    return logger
