"""Structured logging façade over structlog.

Provides development and production presets, a replaceable process-wide
logger, request-scoped loggers carried in a ContextVar, and bridges for code
that expects the standard library ``logging`` module or a plain writer.
The presets are ordinary structlog loggers, so callers can drop down to
structlog features whenever they need to.
"""

import errno
import io
import logging
import sys
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor

from daydev_utils.core.config import get_settings

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# errnos raised when flushing non-seekable outputs such as ttys and pipes
_BENIGN_SYNC_ERRNOS = frozenset({errno.EINVAL, errno.ENOTTY})

_global_logger: Any | None = None
_global_lock = threading.Lock()

_context_logger: ContextVar[Any | None] = ContextVar("daydev_context_logger", default=None)


def rename_message_field(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename 'event' field to 'message' for compatibility.

    Args:
        logger: Logger instance (unused).
        method_name: Method name (unused).
        event_dict: Event dictionary to modify.

    Returns:
        EventDict: Modified event dictionary with message field.
    """
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    try:
        return _LEVELS[level.upper()]
    except KeyError as e:
        raise ValueError(f"Unknown log level: {level!r}") from e


class _StreamLogger:
    """Preset logger that remembers the stream it writes to.

    Delegates everything to the wrapped structlog logger. Methods that return
    a new bound logger keep the stream so ``sync`` works on child loggers.
    """

    def __init__(self, logger: Any, stream: TextIO) -> None:
        self._bound = logger
        self.stream = stream

    def bind(self, **new_values: Any) -> "_StreamLogger":
        return _StreamLogger(self._bound.bind(**new_values), self.stream)

    def new(self, **new_values: Any) -> "_StreamLogger":
        return _StreamLogger(self._bound.new(**new_values), self.stream)

    def unbind(self, *keys: str) -> "_StreamLogger":
        return _StreamLogger(self._bound.unbind(*keys), self.stream)

    def try_unbind(self, *keys: str) -> "_StreamLogger":
        return _StreamLogger(self._bound.try_unbind(*keys), self.stream)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._bound, name)

    def __repr__(self) -> str:
        return f"<_StreamLogger {self._bound!r}>"


def _wrap(processors: list[Processor], level: str | int, stream: TextIO | None) -> _StreamLogger:
    target = stream or sys.stdout
    logger = structlog.wrap_logger(
        structlog.PrintLogger(file=target),
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(level)),
        context_class=dict,
    )
    return _StreamLogger(logger, target)


def new_development(level: str | int = "DEBUG", stream: TextIO | None = None) -> Any:
    """Create a logger configured for local development.

    Human-readable console output with timestamps, call sites and rendered
    tracebacks. Use this in CLI tools and during local runs.

    Args:
        level: Minimum level to emit.
        stream: Output stream. Defaults to stdout.

    Returns:
        A structlog bound logger.

    Raises:
        ValueError: If the level name is unknown.
    """
    target = stream or sys.stdout
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
            },
            additional_ignores=[__name__],
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.ConsoleRenderer(
            colors=_is_tty(target),
            exception_formatter=structlog.dev.plain_traceback,
        ),
    ]
    return _wrap(processors, level, target)


def new_production(level: str | int = "INFO", stream: TextIO | None = None) -> Any:
    """Create a JSON logger suitable for production.

    Structured fields, ISO-8601 UTC timestamps and formatted exception info.
    Use this in servers and background workers.

    Args:
        level: Minimum level to emit.
        stream: Output stream. Defaults to stdout.

    Returns:
        A structlog bound logger.

    Raises:
        ValueError: If the level name is unknown.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        rename_message_field,
        structlog.processors.JSONRenderer(),
    ]
    return _wrap(processors, level, stream)


def new(mode: str | None, **kwargs: Any) -> Any:
    """Choose a logger preset from a mode string.

    "prod" and "production" (case-insensitive) select the production preset,
    anything else the development preset. Handy when wiring via env vars.
    """
    if (mode or "").strip().lower() in ("prod", "production"):
        return new_production(**kwargs)
    return new_development(**kwargs)


def _is_tty(stream: Any) -> bool:
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        # closed stream
        return False


def replace_globals(logger: Any) -> Callable[[], None]:
    """Install a logger as the process-wide global logger.

    Example:
        restore = replace_globals(new_production())
        try:
            ...
        finally:
            restore()

    Args:
        logger: The logger returned by one of the presets (or any structlog logger).

    Returns:
        A callable that reinstalls the previous global logger.
    """
    global _global_logger
    with _global_lock:
        previous = _global_logger
        _global_logger = logger

    def restore() -> None:
        global _global_logger
        with _global_lock:
            _global_logger = previous

    return restore


def _current_global() -> Any:
    logger = _global_logger
    if logger is None:
        return structlog.get_logger()
    return logger


class _GlobalLogger:
    """Handle that resolves the installed global logger on every call.

    Module-level ``logger = get_logger(__name__)`` keeps working after
    ``replace_globals`` swaps the global.
    """

    def __init__(self, **fields: Any) -> None:
        self._fields = fields

    def __getattr__(self, name: str) -> Any:
        logger = _current_global()
        if self._fields:
            logger = logger.bind(**self._fields)
        return getattr(logger, name)

    def __repr__(self) -> str:
        return f"<_GlobalLogger fields={self._fields!r}>"


def get_logger(name: str | None = None) -> Any:
    """Get the global structured logger.

    Args:
        name: Optional logger name, bound as the ``logger`` field.

    Returns:
        A logger that always writes through the currently installed global.
    """
    if name:
        return _GlobalLogger(logger=name)
    return _GlobalLogger()


def sync(logger: Any | None) -> None:
    """Flush any buffered output of a logger.

    Call this at process shutdown. Flushing stdout/stderr or pipes can fail
    with EINVAL/ENOTTY on some platforms; those errors are ignored.

    Raises:
        OSError: For any other flush failure.
    """
    if logger is None:
        return
    stream = getattr(logger, "stream", None)
    if stream is None:
        return
    try:
        stream.flush()
    except OSError as e:
        if e.errno in _BENIGN_SYNC_ERRNOS:
            return
        raise


class _StructlogHandler(logging.Handler):
    """Forward standard library log records to a structlog logger."""

    def __init__(self, logger: Any, level: int = logging.INFO) -> None:
        super().__init__(level)
        self._target = logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._target.log(record.levelno, record.getMessage(), logger=record.name)
        except Exception:
            self.handleError(record)


def std_logger(logger: Any | None = None) -> logging.Logger:
    """Return a standard library logger that writes through a structlog logger.

    Records at INFO and above are forwarded. Useful for integrating with code
    that expects ``logging.Logger``.
    """
    std = logging.Logger("daydev_utils.std")
    std.setLevel(logging.INFO)
    std.addHandler(_StructlogHandler(logger or get_logger()))
    std.propagate = False
    return std


class _LogWriter(io.TextIOBase):
    """Writer that logs every complete line at INFO."""

    def __init__(self, std: logging.Logger) -> None:
        super().__init__()
        self._std = std
        self._buffer = ""

    def writable(self) -> bool:
        return True

    def write(self, s: str) -> int:
        self._buffer += s
        *lines, self._buffer = self._buffer.split("\n")
        for line in lines:
            if line:
                self._std.info(line)
        return len(s)

    def flush(self) -> None:
        if self._buffer:
            self._std.info(self._buffer)
            self._buffer = ""


def std_writer(logger: Any | None = None) -> io.TextIOBase:
    """Return a text writer that logs each line through a structlog logger.

    Handy when an API expects only a file-like object.
    """
    return _LogWriter(std_logger(logger))


def with_context(logger: Any) -> Token:
    """Store a request-scoped logger for the current context.

    Returns:
        A token that ``reset_context`` accepts to restore the previous logger.
    """
    return _context_logger.set(logger)


def reset_context(token: Token) -> None:
    """Restore the scoped logger that was active before ``with_context``."""
    _context_logger.reset(token)


def from_context() -> Any:
    """Get the request-scoped logger, or the global logger if none is set."""
    logger = _context_logger.get()
    if logger is not None:
        return logger
    return get_logger()


@contextmanager
def logger_context(logger: Any) -> Iterator[Any]:
    """Scope a logger to a block.

    Example:
        with logger_context(with_fields(None, user_id="u1")):
            from_context().info("processing")  # includes user_id
    """
    token = with_context(logger)
    try:
        yield logger
    finally:
        reset_context(token)


def with_fields(logger: Any | None, **fields: Any) -> Any:
    """Return a child logger with structured fields attached.

    Use it to enrich logs with request IDs, user IDs and other correlation data.
    """
    if logger is None:
        logger = get_logger()
    return logger.bind(**fields)


def attach_request(request_id: str = "", client_ip: str = "") -> Token:
    """Annotate the scoped logger with request metadata.

    Empty values are skipped. Anything retrieving the logger through
    ``from_context`` afterwards includes the fields.

    Returns:
        A token for ``reset_context``.
    """
    logger = from_context()
    if request_id:
        logger = logger.bind(request_id=request_id)
    if client_ip:
        logger = logger.bind(client_ip=client_ip)
    return with_context(logger)


def log_error(logger: Any | None, err: BaseException | None, msg: str, **fields: Any) -> None:
    """Log an error message, always including the error as the ``error`` field."""
    if logger is None:
        logger = get_logger()
    if err is not None:
        fields["error"] = str(err)
        fields.setdefault("error_type", type(err).__name__)
        if err.__traceback__ is not None:
            fields.setdefault("exc_info", err)
    logger.error(msg, **fields)


def must(factory: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Build a logger or fail loudly.

    For one-off initialization code: if the factory raises, the error is
    written to stderr and re-raised.
    """
    try:
        return factory(*args, **kwargs)
    except Exception as e:
        sys.stderr.write(f"daydev_utils: fatal init error: {e}\n")
        raise


def configure_logging(settings: Any | None = None) -> Callable[[], None]:
    """Configure logging for a process.

    Picks the preset from ``settings.log_mode`` and ``settings.log_level``,
    installs it as the global logger and routes standard library logging to
    stdout at the same level.

    Args:
        settings: Optional settings instance. If not provided, will load from environment.

    Returns:
        A callable that restores the previous global logger.
    """
    if settings is None:
        settings = get_settings()

    restore = replace_globals(new(settings.log_mode, level=settings.log_level))

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )
    return restore
