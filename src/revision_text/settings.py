import logging
import os

from .body_parser import ConverterConfig
from .text_processor import ProcessorConfig

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
    return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return max(0, int(raw))
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


def get_log_level() -> int:
    name = os.environ.get("REVISION_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def load_processor_config() -> ProcessorConfig:
    return ProcessorConfig(
        converter=ConverterConfig(
            strip_comments=_env_bool("REVISION_STRIP_COMMENTS", True),
        ),
        min_content_length=_env_int("REVISION_MIN_CONTENT_LENGTH", 3),
        latin_letters_only=_env_bool("REVISION_LATIN_LETTERS_ONLY", True),
    )
