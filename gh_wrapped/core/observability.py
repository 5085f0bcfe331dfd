import json
import logging
from datetime import datetime
from datetime import UTC

import sentry_sdk

from gh_wrapped.settings import Settings


class JSONLogFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "context": record.name,
            "message": record.getMessage(),
        }
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            stack = self.formatException(record.exc_info).splitlines()
            entry["error"] = {
                "name": type(exc).__name__,
                "message": str(exc),
                "stack": "\n".join(stack[-5:]),
            }
        return json.dumps(entry, default=str)


def configure_logging(app_settings: Settings) -> None:
    """Attach the JSON handler to the package logger."""

    logger = logging.getLogger("gh_wrapped")
    logger.setLevel(app_settings.log_level or logging.INFO)
    logger.propagate = False

    for handler in list(logger.handlers):
        if getattr(handler, "gh_wrapped_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONLogFormatter())
    handler.gh_wrapped_handler = True
    logger.addHandler(handler)


def init_sentry(app_settings: Settings) -> None:
    """Initialize Sentry SDK when DSN is configured."""

    if not app_settings.sentry_dsn:
        return

    sentry_sdk.init(
        dsn=app_settings.sentry_dsn,
        environment=app_settings.environment,
        release=app_settings.release,
        traces_sample_rate=app_settings.sentry_traces_sample_rate,
        send_default_pii=False,
    )
