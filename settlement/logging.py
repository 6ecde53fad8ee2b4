import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from settlement.settings import settings

TEXT_FORMAT = "%(levelname)s %(name)s%(context)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(period)s %(counterparty)s %(message)s"

# Chatty at INFO during every startup migration and query.
QUIET_LOGGERS = ("sqlalchemy.engine", "alembic.runtime.migration")

_period: ContextVar[str] = ContextVar("settlement_period", default="")
_counterparty: ContextVar[str] = ContextVar("settlement_counterparty", default="")


class SettlementContextFilter(logging.Filter):
    """Stamp the period and counterparty currently being settled on each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.period = _period.get()
        record.counterparty = _counterparty.get()
        return True


class ContextTextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        parts = [part for part in (getattr(record, "period", ""), getattr(record, "counterparty", "")) if part]
        record.context = f" [{' '.join(parts)}]" if parts else ""
        return super().format(record)


@contextmanager
def log_context(period: str | None = None, counterparty: str | None = None) -> Iterator[None]:
    """Bind settlement fields to every log line emitted inside the block."""
    tokens = []
    if period is not None:
        tokens.append((_period, _period.set(period)))
    if counterparty is not None:
        tokens.append((_counterparty, _counterparty.set(counterparty)))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger based on settings. Call once at startup."""
    level_name = (level or settings.log_level).upper()
    root_level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(SettlementContextFilter())

    if settings.log_json:
        from pythonjsonlogger.json import JsonFormatter

        handler.setFormatter(
            JsonFormatter(
                fmt=JSON_FORMAT,
                rename_fields={"asctime": "timestamp", "levelname": "level"},
            )
        )
    else:
        handler.setFormatter(ContextTextFormatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.setLevel(root_level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

