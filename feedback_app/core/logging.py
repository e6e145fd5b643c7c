"""Structured logging configuration."""

import logging
import sys

from feedback_app.core.config import settings

# Extra fields lifted out of ``logger.x(..., extra={...})`` calls
CONTEXT_FIELDS = ("request_id", "form_id", "response_id", "action")

DEV_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite")


class StructuredFormatter(logging.Formatter):
    """key=value log lines for staging and production."""

    def format(self, record: logging.LogRecord) -> str:
        pairs = [
            ("timestamp", self.formatTime(record, self.datefmt)),
            ("level", record.levelname),
            ("logger", record.name),
            ("message", record.getMessage()),
        ]
        pairs.extend(
            (key, getattr(record, key)) for key in CONTEXT_FIELDS if hasattr(record, key)
        )
        if record.exc_info:
            pairs.append(("exception", self.formatException(record.exc_info)))

        return " ".join(f"{key}={value}" for key, value in pairs)


def setup_logging(level: str | None = None) -> None:
    """Send all application logs to stdout.

    Dev gets a human readable format, every other environment the
    structured one. Calling this again replaces the previous handler.
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(
        logging.Formatter(DEV_FORMAT) if settings.is_dev else StructuredFormatter()
    )

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


class SubmissionHookLogger:
    """Logger for post-submission follow-up hooks.

    Priority escalation and upsell queueing are not wired to any
    notification channel yet; the hook point is recorded in the log.
    """

    def __init__(self) -> None:
        self.logger = get_logger("hooks")

    def priority_escalation(self, response_id: str) -> None:
        """Record that a priority-flagged response needs follow-up."""
        self.logger.info(
            f"HOOK: priority flag set for response {response_id}",
            extra={"response_id": response_id, "action": "priority_escalation"},
        )

    def upsell_candidate(self, response_id: str) -> None:
        """Record that a response qualifies for the nurture queue."""
        self.logger.info(
            f"HOOK: upsell candidate response {response_id}",
            extra={"response_id": response_id, "action": "upsell_queue"},
        )


hook_logger = SubmissionHookLogger()
