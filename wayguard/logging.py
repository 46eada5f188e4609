import logging
import sys
from typing import List, Optional

import structlog
from structlog.types import Processor

from wayguard.core.config import settings

# Loggers whose own handlers are replaced so their records reach the root handler
ROUTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def round_coordinates(_, __, event_dict):
    """Keep only ~1 km precision of latitude/longitude in shipped logs."""
    for key in ("latitude", "longitude"):
        if isinstance(event_dict.get(key), float):
            event_dict[key] = round(event_dict[key], 2)
    return event_dict


def _pre_chain() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderer(is_local: bool) -> List[Processor]:
    if is_local:
        return [structlog.dev.ConsoleRenderer()]
    return [
        round_coordinates,
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(env: Optional[str] = None, level: int = logging.INFO) -> None:
    """
    Sends both structlog events and plain `logging` records through one
    handler on stdout: console output in development, JSON lines elsewhere.
    """
    is_local = (env or settings.ENV).lower() == "development"

    structlog.configure(
        processors=_pre_chain() + [
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_pre_chain(),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta] + _renderer(is_local),
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in ROUTED_LOGGERS:
        routed = logging.getLogger(name)
        routed.handlers = []
        routed.propagate = True
