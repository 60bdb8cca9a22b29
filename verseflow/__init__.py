"""
Top-level package for VerseFlow.

VerseFlow helps a user memorise Bible verses by listening and
repeating: it speaks a short chunk of a verse, listens to the user
repeat it, checks the repetition and moves on (or asks again).  Verses
recited completely are remembered as *revealed*.

Example usage::

    from verseflow import get_app_config, get_default_connector
    from verseflow.core import RecitationFlowEngine, RecitationSettings

    cfg = get_app_config()
    connector = get_default_connector(cfg.get("connector"))
    verses = connector.get_verses("John")

The Qt and vosk speech ports are not imported here so that the core
can be used (and tested) without those libraries; see
:mod:`verseflow.speech`.
"""

from .config import AppConfig, get_app_config, load_config  # noqa: F401
from .connectors import get_default_connector  # noqa: F401
from .core.settings import RecitationSettings  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "RecitationSettings",
    "get_app_config",
    "get_default_connector",
    "load_config",
]
