"""
Logging configuration

Every record carries the id of the HTTP request (or sync run) it belongs to,
so a post failure in the log can be traced back to the call that caused it.
"""

import contextvars
import logging
import sys
from core.config import settings

NO_REQUEST = "-"

# Set by the request middleware; "-" outside a request (scheduler, scripts)
request_id_var: contextvars.ContextVar = contextvars.ContextVar("request_id", default=NO_REQUEST)


class RequestContextFilter(logging.Filter):
    """Attach the current request id to every record as `request_id`"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def setup_logging():
    """Configure application logging"""

    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(request_id)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler]
    )

    # Set SQLAlchemy, httpx and APScheduler logging to WARNING to reduce noise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at {settings.LOG_LEVEL} level")
