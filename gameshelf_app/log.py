import os
import sys
import json
import logging
from logging.handlers import RotatingFileHandler

try:
    from flask import g  # type: ignore
except Exception:  # pragma: no cover
    g = None

# Package logger; module loggers (gameshelf_app.*) propagate here
logger = logging.getLogger("gameshelf_app")
logger.setLevel(logging.INFO)

# Determine log file path
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
LOG_DIR = os.environ.get('GAMESHELF_LOG_DIR', os.path.join(BASE_DIR, 'instance'))
LOG_FILE = os.path.join(LOG_DIR, 'gameshelf.log')

# Debug logging (local-only file)
DEBUG_LOGGING = os.environ.get('DEBUG_LOGGING', 'false').lower() in ('1', 'true', 'yes', 'on')
DEBUG_LOG_DIR = os.path.join(BASE_DIR, 'debugging')
DEBUG_LOG_FILE = os.path.join(DEBUG_LOG_DIR, 'debug.log')

debug_logger = logging.getLogger("gameshelf_app.debug")
debug_logger.setLevel(logging.INFO)
debug_logger.propagate = False


def configure_logging() -> None:
    """Attach file and stdout handlers once."""
    if any(getattr(h, "_gameshelf", False) for h in logger.handlers):
        return

    os.makedirs(LOG_DIR, exist_ok=True)

    # File Handler
    file_handler = RotatingFileHandler(LOG_FILE, maxBytes=10*1024*1024, backupCount=5)
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    file_handler._gameshelf = True
    logger.addHandler(file_handler)

    # Stream Handler (stdout)
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter('%(message)s'))  # Keep stdout clean
    stream_handler._gameshelf = True
    logger.addHandler(stream_handler)

    if DEBUG_LOGGING and not any(
        getattr(h, "baseFilename", None) == DEBUG_LOG_FILE for h in debug_logger.handlers
    ):
        os.makedirs(DEBUG_LOG_DIR, exist_ok=True)
        debug_handler = RotatingFileHandler(DEBUG_LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=10)
        debug_handler.setFormatter(logging.Formatter('%(message)s'))
        debug_logger.addHandler(debug_handler)
    if not DEBUG_LOGGING:
        debug_logger.disabled = True


def _request_prefix() -> str:
    """Return request id prefix if available."""
    try:
        if g and getattr(g, "request_id", None):
            return f"[{g.request_id}] "
    except RuntimeError:
        # Outside request context
        pass
    return ""


def log(msg: str) -> None:
    """Log a message to console and file, tagged with the request id."""
    logger.info(f"{_request_prefix()}{msg}")


def debug_log_event(event: dict) -> None:
    """Write structured debug events to a local file."""
    if debug_logger.disabled or not debug_logger.handlers:
        return
    try:
        debug_logger.info(json.dumps(event, ensure_ascii=True, separators=(',', ':')))
    except (TypeError, ValueError) as exc:
        logger.info(f"⚠️ Debug log failure: {exc}")
