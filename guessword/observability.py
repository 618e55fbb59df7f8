"""Structured (JSON) logging setup for the API process."""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter


class ServiceNameFilter(logging.Filter):
    """Stamp every record with the service name."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.service = self._service_name
        return True


def configure_logging(level: str = "INFO", service_name: str = "guessword") -> None:
    """Install a JSON handler on the root logger."""

    formatter = JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(service)s",
        rename_fields={"levelname": "level", "name": "logger"},
    )

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(ServiceNameFilter(service_name))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
