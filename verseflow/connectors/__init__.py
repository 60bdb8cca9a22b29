"""Bible text sources.

``get_default_connector`` turns the ``connector`` section of the config
into a :class:`BaseConnector`:

``local`` (default)
    :class:`LocalBibleConnector`, reads ``<bible_dir>/<version>.json``
    and works offline.  Options: ``bible_dir``, ``version``.
``bible_api``
    :class:`BibleApiConnector`, fetches chapters from a bible-api.com
    style service.  Options: ``base_url``, ``translation``, ``timeout``.

Example::

    {"connector": {"type": "bible_api", "translation": "web"}}
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple, Type

from .base import BaseConnector
from .bible_api import BibleApiConnector
from .local_bible import LocalBibleConnector

logger = logging.getLogger(__name__)

#: type name -> (connector class, config keys passed to its constructor)
CONNECTOR_TYPES: Dict[str, Tuple[Type[BaseConnector], Tuple[str, ...]]] = {
    "local": (LocalBibleConnector, ("bible_dir", "version")),
    "bible_api": (BibleApiConnector, ("base_url", "translation", "timeout")),
}


def get_default_connector(config: Optional[Mapping[str, Any]] = None) -> BaseConnector:
    """Build the connector described by *config*.

    An unknown ``type`` logs a warning and falls back to ``local``.
    Keys other than ``type`` that the chosen connector does not accept
    are ignored.
    """
    config = config or {}
    connector_type = str(config.get("type", "local")).lower()
    if connector_type not in CONNECTOR_TYPES:
        logger.warning("Unknown connector type %r; using local", connector_type)
        connector_type = "local"

    cls, option_keys = CONNECTOR_TYPES[connector_type]
    kwargs = {key: config[key] for key in option_keys if key in config}
    logger.info("Using %s with %s", cls.__name__, kwargs)
    return cls(**kwargs)


__all__ = [
    "BaseConnector",
    "BibleApiConnector",
    "CONNECTOR_TYPES",
    "LocalBibleConnector",
    "get_default_connector",
]
