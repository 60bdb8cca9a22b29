"""Small helpers shared across VerseFlow (paths, references, logging)."""

from .paths import find_data_dir, find_data_file  # noqa: F401
from .refs import BOOK_NAMES, format_reference, parse_reference  # noqa: F401
from .session_logger import configure_session_logger  # noqa: F401
