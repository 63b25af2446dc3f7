"""
Card Store Factory
Centralizes the logic for selecting the card record store implementation.
"""

import logging

from medace.application.config import AppConfig
from medace.domain.ports import CardRecordStore
from medace.infrastructure.adapters.local_store import LocalCardStore
from medace.infrastructure.adapters.remote_store import RemoteCardStore

logger = logging.getLogger(__name__)


def get_card_store(config: AppConfig) -> CardRecordStore:
    """
    Returns the CardRecordStore implementation selected by config.
    """
    if config.backend == "remote":
        logger.debug(f"Backend: remote ({config.remote_url})")
        return RemoteCardStore(url=config.remote_url, timeout=config.request_timeout)

    logger.debug(f"Backend: local ({config.data_file or 'memory'})")
    return LocalCardStore(data_file=config.data_file)
