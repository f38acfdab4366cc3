import logging
import sys

from fontpack.config import settings

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    root = logging.getLogger()
    root.setLevel((level or settings.log_level).upper())
    if any(getattr(handler, "_fontpack", False) for handler in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    handler._fontpack = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    # httpx logs every request line at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
