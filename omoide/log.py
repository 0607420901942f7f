import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

_INITIALIZED = False

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(
    level: str | None = None, *, log_file: str | Path | None = None
) -> None:
    """Configure root logging with a console handler and an optional log file.

    Calling it again is a no-op, so entry points may call it unconditionally.
    """
    global _INITIALIZED
    if _INITIALIZED:
        return

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(str(path), maxBytes=1_000_000, backupCount=5)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    _INITIALIZED = True
    logging.getLogger(__name__).debug("Logging configured (file: %s)", log_file)


__all__ = ["configure_logging"]
