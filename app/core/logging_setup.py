import logging
import sys

from app.core.config import settings


def setup_logging(log_file: str = settings.log_file):
    """Configures logging to write to both console and a file."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )
    # Ensure specific loggers are also propagating or handled
    for name in ("uvicorn", "uvicorn.error"):
        logging.getLogger(name).handlers = []  # Avoid double logging if uvicorn sets its own
        logging.getLogger(name).propagate = True
    # Our own access middleware writes one line per request
    logging.getLogger("uvicorn.access").disabled = True
