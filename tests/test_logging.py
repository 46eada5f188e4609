import logging

import structlog

from wayguard.logging import configure_logging, round_coordinates


def test_round_coordinates_keeps_other_fields():
    event = {"event": "emergency_dispatched", "latitude": 28.613912, "longitude": 77.209045, "severity": 5}

    assert round_coordinates(None, "warning", event) == {
        "event": "emergency_dispatched",
        "latitude": 28.61,
        "longitude": 77.21,
        "severity": 5,
    }


def test_stdlib_records_share_the_structlog_handler():
    try:
        configure_logging(env="production", level=logging.WARNING)

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
        assert root.level == logging.WARNING
        assert logging.getLogger("uvicorn.access").handlers == []
        assert logging.getLogger("uvicorn.access").propagate is True
    finally:
        configure_logging(env="development")
