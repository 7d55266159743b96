"""
aggregate-planner - structured run logging.

File: src/aggregate_planner/observability/logging.py

Purpose
- Write one JSON object per log record to ``<log_dir>/<run_id>/aggregate-planner.jsonl``.
- Hand records to the file sink through a queue so planning never waits on disk I/O.
- Stamp every record with the run id and the correlation fields bound in scope.
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.handlers
import queue
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

JSONValue = str | int | float | bool | None | list["JSONValue"] | dict[str, "JSONValue"]

_DEFAULT_LOG_FILENAME: Final[str] = "aggregate-planner.jsonl"
_DEFAULT_LOGGER_NAME: Final[str] = "aggregate_planner"

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "correlation"}

_CORRELATION: contextvars.ContextVar[tuple[tuple[str, str], ...]] = contextvars.ContextVar(
    "aggregate_planner_correlation", default=()
)

_ACTIVE_HANDLE: StructuredLoggingHandle | None = None


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Where and how verbosely a single run logs."""

    run_id: str
    base_log_dir: Path | str = Path("logs")
    logger_name: str = _DEFAULT_LOGGER_NAME
    level: int | str = "INFO"
    log_filename: str = _DEFAULT_LOG_FILENAME
    log_to_stderr: bool = False


class _CorrelationQueueHandler(logging.handlers.QueueHandler):
    """Snapshot correlation fields on the emitting thread before enqueueing."""

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        record.correlation = dict(_CORRELATION.get())
        return super().prepare(record)


class _JsonLineFormatter(logging.Formatter):
    def __init__(self, run_id: str) -> None:
        super().__init__()
        self._run_id = run_id

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, JSONValue] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": self._run_id,
        }
        event.update(getattr(record, "correlation", {}))

        fields = {
            key: _to_json(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        if fields:
            event["fields"] = fields
        if record.exc_info is not None:
            event["exception"] = self.formatException(record.exc_info)

        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class StructuredLoggingHandle:
    """An active logging setup; ``shutdown`` drains the queue and closes sinks."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        log_path: Path,
        queue_handler: logging.handlers.QueueHandler,
        listener: logging.handlers.QueueListener,
        sinks: tuple[logging.Handler, ...],
    ) -> None:
        self.logger = logger
        self.log_path = log_path
        self._queue_handler = queue_handler
        self._listener = listener
        self._sinks = sinks
        self._is_shutdown = False

    @property
    def is_shutdown(self) -> bool:
        return self._is_shutdown

    def shutdown(self) -> None:
        if self._is_shutdown:
            return
        self._is_shutdown = True

        self.logger.removeHandler(self._queue_handler)
        self._queue_handler.close()
        self._listener.stop()
        self.logger.propagate = True
        for sink in self._sinks:
            sink.close()


def setup_logging(
    observability_config: Mapping[str, object] | None = None,
    *,
    run_id: str,
    level: int | str | None = None,
    logger_name: str = _DEFAULT_LOGGER_NAME,
) -> StructuredLoggingHandle:
    """Configure logging from an ``[observability]`` config section.

    ``level`` overrides the section's ``log_level`` when given.
    """

    section = dict(observability_config or {})
    resolved_level = level if level is not None else section.get("log_level", "INFO")
    log_dir = section.get("log_dir", "logs")
    return setup_structured_logging(
        LoggingConfig(
            run_id=run_id,
            base_log_dir=log_dir if isinstance(log_dir, (Path, str)) else "logs",
            logger_name=logger_name,
            level=resolved_level if isinstance(resolved_level, (int, str)) else "INFO",
            log_to_stderr=bool(section.get("log_to_console", False)),
        )
    )


def setup_structured_logging(config: LoggingConfig) -> StructuredLoggingHandle:
    """Start queue-backed JSON-lines logging for one run.

    Any previously active setup is shut down first. With ``log_to_stderr``
    records are mirrored to stderr; stdout stays reserved for command output.
    """
    global _ACTIVE_HANDLE

    run_id = config.run_id.strip()
    if not run_id:
        raise ValueError("run_id must not be empty")
    if Path(config.log_filename).name != config.log_filename:
        raise ValueError("log_filename must not include path separators")
    level = _parse_level(config.level)

    shutdown_logging()

    run_log_dir = Path(config.base_log_dir) / run_id
    run_log_dir.mkdir(parents=True, exist_ok=True)
    log_path = run_log_dir / config.log_filename

    formatter = _JsonLineFormatter(run_id)
    sinks: list[logging.Handler] = [logging.FileHandler(log_path, encoding="utf-8")]
    if config.log_to_stderr:
        sinks.append(logging.StreamHandler())
    for sink in sinks:
        sink.setFormatter(formatter)

    log_queue: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
    queue_handler = _CorrelationQueueHandler(log_queue)
    listener = logging.handlers.QueueListener(log_queue, *sinks)

    logger = logging.getLogger(config.logger_name)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.setLevel(level)
    logger.propagate = False
    logger.addHandler(queue_handler)
    listener.start()

    _ACTIVE_HANDLE = StructuredLoggingHandle(
        logger=logger,
        log_path=log_path,
        queue_handler=queue_handler,
        listener=listener,
        sinks=tuple(sinks),
    )
    return _ACTIVE_HANDLE


def shutdown_logging(handle: StructuredLoggingHandle | None = None) -> None:
    """Shut down ``handle``, or the active setup when none is given."""
    global _ACTIVE_HANDLE

    resolved = handle if handle is not None else _ACTIVE_HANDLE
    if resolved is None:
        return
    resolved.shutdown()
    if _ACTIVE_HANDLE is resolved:
        _ACTIVE_HANDLE = None


def get_correlation_context() -> dict[str, str]:
    return dict(_CORRELATION.get())


@contextmanager
def correlation_scope(**fields: str | None) -> Iterator[None]:
    """Bind correlation fields for records logged in scope; ``None`` unbinds a key."""
    state = get_correlation_context()
    for key, value in fields.items():
        if value is None:
            state.pop(key, None)
        else:
            state[key] = value
    token = _CORRELATION.set(tuple(state.items()))
    try:
        yield
    finally:
        _CORRELATION.reset(token)


def _parse_level(value: int | str) -> int:
    if isinstance(value, int):
        return value
    parsed = logging.getLevelName(value.strip().upper())
    if isinstance(parsed, int):
        return parsed
    raise ValueError(f"unsupported logging level {value!r}")


def _to_json(value: object) -> JSONValue:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Path):
        return value.as_posix()
    if isinstance(value, Mapping):
        return {str(key): _to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    return str(value)


__all__ = [
    "LoggingConfig",
    "StructuredLoggingHandle",
    "correlation_scope",
    "get_correlation_context",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
