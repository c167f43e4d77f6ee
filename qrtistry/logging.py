"""QRtistry structured logging: audit events, console/JSON formatters and call tracing."""

import functools
import json
import logging
import sys
import time
import traceback
from datetime import datetime, timezone

ROOT_LOGGER = "qrtistry"

# Custom AUDIT level (between WARNING=30 and ERROR=40)
AUDIT = 35
logging.addLevelName(AUDIT, "AUDIT")


def _truncate(value: object, max_len: int = 80) -> str:
    s = str(value)
    if len(s) > max_len:
        return s[:max_len] + "..."
    return s


def _describe(value: object) -> str:
    """Short, log-safe description of an argument or return value."""
    type_name = type(value).__name__
    if hasattr(value, "size") and hasattr(value, "mode"):
        # PIL images: never dump pixel data
        return f"<{type_name} {value.mode} {value.size[0]}x{value.size[1]}>"
    if hasattr(value, "shape") and hasattr(value, "dtype"):
        return f"<{type_name} {'x'.join(map(str, value.shape))} {value.dtype}>"
    if isinstance(value, (str, int, float, bool)) or value is None:
        return _truncate(repr(value))
    if isinstance(value, (list, tuple)):
        return f"{type_name}[{len(value)}]"
    if isinstance(value, dict):
        return f"dict[{len(value)} keys]"
    s = repr(value)
    return s if len(s) <= 100 else f"<{type_name}>"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log files and machine parsing."""

    def format(self, record):
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "src": record.name,
        }
        event = getattr(record, "event", None)
        if event is not None:
            entry["event"] = event
        elif record.getMessage():
            entry["msg"] = record.getMessage()
        if hasattr(record, "duration_ms"):
            entry["duration_ms"] = round(record.duration_ms, 2)
        if getattr(record, "ctx", None):
            entry["ctx"] = record.ctx
        if record.exc_info and record.exc_info[1]:
            entry["traceback"] = traceback.format_exception(*record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Coloured, human-readable console lines."""

    COLORS = {
        "DEBUG": "\033[36m",    # cyan
        "INFO": "\033[32m",     # green
        "AUDIT": "\033[35m",    # magenta
        "WARNING": "\033[33m",  # yellow
        "ERROR": "\033[31m",    # red
    }
    RESET = "\033[0m"

    def format(self, record):
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%H:%M:%S.%f")[:-3]
        color = self.COLORS.get(record.levelname, "")
        parts = [ts, f"{color}{record.levelname:5s}{self.RESET}", f"[{record.name}]"]

        event = getattr(record, "event", None)
        if event is not None:
            parts.append(event)
        if hasattr(record, "duration_ms"):
            parts.append(f"({record.duration_ms:.1f}ms)")

        ctx = getattr(record, "ctx", None)
        if ctx:
            parts.append(" ".join(f"{k}={_truncate(v)}" for k, v in ctx.items()))
        elif event is None and record.getMessage():
            parts.append(record.getMessage())

        if record.exc_info and record.exc_info[1]:
            parts.append("\n" + "".join(traceback.format_exception(*record.exc_info)))
        return " ".join(parts)


def setup_logging(level: str = "INFO", log_file: str | None = None, json_format: bool = False):
    """Configure the root qrtistry logger.

    Args:
        level: Log level name (DEBUG, INFO, AUDIT, WARNING, ERROR).
        log_file: If set, JSON lines are also written to this path.
        json_format: Use the JSON formatter on the console too.
    """
    root = logging.getLogger(ROOT_LOGGER)
    level_value = logging.getLevelName(level.upper())
    root.setLevel(level_value if isinstance(level_value, int) else logging.INFO)
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(JsonFormatter() if json_format else ConsoleFormatter())
    root.addHandler(console)

    if log_file:
        fh = logging.FileHandler(log_file)
        fh.setFormatter(JsonFormatter())
        root.addHandler(fh)


def get_logger(module_name: str) -> logging.Logger:
    """Logger scoped under the qrtistry namespace."""
    return logging.getLogger(f"{ROOT_LOGGER}.{module_name}")


def _emit(log: logging.Logger, level: int, event: str, ctx: dict | None = None,
          duration_ms: float | None = None, exc_info=None) -> None:
    if not log.isEnabledFor(level):
        return
    record = log.makeRecord(
        name=log.name, level=level, fn="", lno=0,
        msg="", args=(), exc_info=exc_info,
    )
    record.event = event
    record.ctx = ctx or {}
    if duration_ms is not None:
        record.duration_ms = duration_ms
    log.handle(record)


def audit(event: str, logger: logging.Logger | None = None, **context):
    """Emit an AUDIT-level structured entry.

    Args:
        event: Machine-readable event tag, e.g. ``"qr.rendered"``.
        logger: Logger to use; defaults to the qrtistry root.
        **context: Key/value pairs attached to the event.
    """
    _emit(logger or logging.getLogger(ROOT_LOGGER), AUDIT, event, context)


def trace(func=None, *, logger_name: str | None = None):
    """Decorator that logs entry (DEBUG), exit with timing (INFO) and failures (ERROR).

    Exceptions are logged with their traceback and re-raised unchanged.
    """
    def decorator(fn):
        log = get_logger(logger_name or fn.__module__.replace(f"{ROOT_LOGGER}.", ""))

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            name = fn.__name__
            if log.isEnabledFor(logging.DEBUG):
                _emit(log, logging.DEBUG, f"{name}.enter", {
                    "args": [_describe(a) for a in args],
                    "kwargs": {k: _describe(v) for k, v in kwargs.items()},
                })

            start = time.perf_counter()
            try:
                result = fn(*args, **kwargs)
            except Exception:
                _emit(log, logging.ERROR, f"{name}.error", {"function": name},
                      duration_ms=(time.perf_counter() - start) * 1000,
                      exc_info=sys.exc_info())
                raise

            _emit(log, logging.INFO, f"{name}.done", {"result": _describe(result)},
                  duration_ms=(time.perf_counter() - start) * 1000)
            return result

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
