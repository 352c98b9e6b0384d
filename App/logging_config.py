"""Logging setup shared by the API, the CLI and the test suite."""
from __future__ import annotations

import json
import logging
import os
import socket
import sys
import time
from typing import Any, Dict

from flask import Flask

DEFAULT_SERVICE_NAME = 'andrino-academy-availability'

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime'}


def _structured_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith('_')
    }


class JsonLogFormatter(logging.Formatter):
    """One JSON document per line, for log shippers."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service = service_name
        self._host = socket.gethostname()

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            'timestamp': int(record.created * 1000),
            'logger': record.name,
            'msg': record.getMessage(),
            'level': record.levelname.lower(),
            'host': self._host,
            'service': self._service,
        }
        payload.update(_structured_fields(record))
        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Readable single-line header followed by the structured fields, if any."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(record.created))
        line = f"[{timestamp}] {record.levelname:<7} [{record.name}] {record.getMessage()}"
        fields = _structured_fields(record)
        if fields:
            line = f"{line} {json.dumps(fields, ensure_ascii=False, default=str)}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(app: Flask) -> None:
    """Install a single stdout handler on the root logger."""
    service_name = app.config.get('SERVICE_NAME', DEFAULT_SERVICE_NAME)
    log_level = str(app.config.get('LOG_LEVEL', os.environ.get('LOG_LEVEL', 'INFO'))).upper()
    env = app.config.get('ENV', os.environ.get('ENV', 'development'))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in tuple(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    if env in {'production', 'staging'}:
        formatter: logging.Formatter = JsonLogFormatter(service_name)
    else:
        formatter = ConsoleFormatter()
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logging.captureWarnings(True)

    root_logger.info(
        'Logging initialized',
        extra={
            'event': 'logging_initialized',
            'service': service_name,
            'environment': env,
            'level': log_level,
        },
    )
