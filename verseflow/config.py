"""
Configuration for VerseFlow.

Settings come from ``config_default_settings.json`` (found next to the
package or in the working directory), optionally overlaid with a user
JSON file named on the command line or in the ``VERSEFLOW_CONFIG``
environment variable.  Nested sections are merged key by key, so a user
file only needs the values it changes::

    {"recitation": {"word_limit": 8}}

The engine never reads configuration on its own: the caller builds a
:class:`RecitationSettings` from the loaded :class:`AppConfig` and
passes it in, re-injecting a new value whenever the user changes a
setting::

    cfg = get_app_config()
    engine = RecitationFlowEngine(..., settings=RecitationSettings.from_config(cfg))
    engine.update_settings(engine.settings.replace(word_limit=8))
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .core.settings import RecitationSettings, clamp_word_limit  # noqa: F401
from .utils.paths import find_data_file

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "config_default_settings.json"

#: Environment variable naming a JSON file with user overrides.
CONFIG_ENV_VAR = "VERSEFLOW_CONFIG"

_MISSING = object()


def _deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@dataclass
class AppConfig:
    """Merged configuration tree.

    Sections: ``recitation``, ``connector``, ``storage``, ``speech`` and
    ``logging``.  Keys this module does not know about are kept.
    """

    data: Dict[str, Any] = field(default_factory=dict)

    def get(self, *keys: str, default: Optional[Any] = None) -> Any:
        """Follow *keys* into the tree, e.g. ``cfg.get("speech", "samplerate")``.

        :return: The value found, or ``default`` as soon as a key is
            missing or a non-dict is reached.
        """
        node: Any = self.data
        for key in keys:
            if not isinstance(node, Mapping):
                return default
            node = node.get(key, _MISSING)
            if node is _MISSING:
                return default
        return node

    def section(self, name: str) -> Dict[str, Any]:
        """Return a copy of one top-level section (empty if absent)."""
        value = self.data.get(name)
        return dict(value) if isinstance(value, Mapping) else {}

    def merge(self, other: Mapping[str, Any]) -> None:
        """Overlay *other*; its values win and nested sections merge."""
        self.data = _deep_merge(self.data, other)


def _read_json(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def load_config(user_config_path: Optional[os.PathLike] = None) -> AppConfig:
    """Load the defaults and overlay an optional user file.

    :param user_config_path: JSON file with overrides; ignored if it
        does not exist.
    """
    cfg = AppConfig()
    try:
        cfg.merge(_read_json(find_data_file(DEFAULT_CONFIG_NAME)))
    except FileNotFoundError:
        logger.warning("%s not found; using built-in defaults", DEFAULT_CONFIG_NAME)

    if user_config_path:
        user_path = Path(user_config_path).expanduser()
        if user_path.is_file():
            cfg.merge(_read_json(user_path))
            logger.debug("Merged user config from %s", user_path)
        else:
            logger.debug("User config %s does not exist; ignored", user_path)
    return cfg


def get_app_config() -> AppConfig:
    """Load the configuration, honouring the ``VERSEFLOW_CONFIG`` variable."""
    return load_config(os.environ.get(CONFIG_ENV_VAR))


__all__ = [
    "AppConfig",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_NAME",
    "RecitationSettings",
    "clamp_word_limit",
    "get_app_config",
    "load_config",
]
