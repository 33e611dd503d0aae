"""Application log formatting."""

import json
import logging
from datetime import datetime, timezone

from flask import has_request_context, request


class RequestFormatter(logging.Formatter):
    """Formatter that emits JSON or plain lines with request context."""

    def __init__(self, as_json=False):
        super().__init__()
        self.as_json = as_json

    def format(self, record):
        payload = {
            'ts': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'msg': record.getMessage(),
            'component': getattr(record, 'component', 'app'),
        }
        if has_request_context():
            payload['route'] = request.path
            payload['method'] = request.method
        context = getattr(record, 'context', None)
        if context:
            payload['context'] = context
        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)

        if self.as_json:
            return json.dumps(payload, ensure_ascii=True, default=str)
        return _format_plain(payload)


def _format_plain(payload):
    parts = [payload['ts'], f"[{payload['level']}]", payload['msg'],
             f"component={payload['component']}"]
    if 'route' in payload:
        parts.append(f"{payload['method']} {payload['route']}")
    if 'context' in payload:
        parts.append(' '.join(f'{k}={v}' for k, v in payload['context'].items()))
    line = ' '.join(parts)
    if 'exception' in payload:
        line = f"{line}\n{payload['exception']}"
    return line


def configure_logging(app):
    """Configure the Flask logger from LOG_LEVEL and LOG_FORMAT."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(RequestFormatter(as_json=app.config.get('LOG_FORMAT') == 'json'))

    app.logger.handlers.clear()
    app.logger.addHandler(handler)
    app.logger.setLevel(level)
