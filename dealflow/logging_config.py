"""
Structured logging configuration.

Called once from create_app(). Records carry the HTTP method and path of the
request being handled ('-' outside a request). Text or JSON output is picked by
Settings.log_format.
"""
import json
import logging
import sys
from datetime import datetime, timezone

from flask import has_request_context, request


class RequestContextFilter(logging.Filter):
    """Stamp record.request with 'METHOD /path' when inside a Flask request."""

    def filter(self, record):
        if has_request_context():
            record.request = f'{request.method} {request.path}'
        else:
            record.request = '-'
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line; request and exception keys only when present."""

    def format(self, record):
        entry = {
            'ts': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        req = getattr(record, 'request', '-')
        if req != '-':
            entry['request'] = req
        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


TEXT_FORMAT = '[%(asctime)s] %(levelname)s %(name)s [%(request)s] %(message)s'

# Third-party loggers that are noisy at INFO
_NOISY_LOGGERS = ('urllib3', 'sqlalchemy.engine', 'werkzeug')


def configure_logging(settings):
    """Install a single stderr handler on the root logger."""
    level = logging.getLevelName((settings.log_level or 'INFO').upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    if (settings.log_format or 'text').lower() == 'json':
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
