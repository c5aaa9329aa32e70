"""Structured logging: structlog events rendered by rich on stdout or written as JSON lines."""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeAlias, cast

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
import structlog
from structlog.processors import CallsiteParameter
from structlog.stdlib import BoundLogger, ProcessorFormatter

from generative_ai.settings import Settings, settings

if TYPE_CHECKING:
    from structlog.typing import EventDict, Processor

LogValue: TypeAlias = str | bytes | int | float | bool | None | Mapping[str, "LogValue"] | list["LogValue"]

# Wire keys holding prompt or model content.
_CONTENT_KEYS = frozenset({"text", "args", "response"})
# Wire keys holding base64 blobs; summarized even when content logging is allowed.
_BLOB_KEYS = frozenset({"data"})

_HEADER_KEYS = frozenset({"timestamp", "level", "component", "event", "action", "direction"})

_LEVEL_COLORS: dict[str, str] = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bright_red",
}

_ARROWS: dict[str, str] = {
    "request": "[cyan]→ request[/]",
    "response": "[magenta]← response[/]",
}


class LoggingState(BaseModel):
    """Settings the installed handlers were built from, and the handlers themselves."""

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    configured: bool = False
    active_settings: Settings = settings
    handlers: list[logging.Handler] = Field(default_factory=list)


_STATE = LoggingState()


def render_console_line(_logger: object, _method: str, event_dict: EventDict) -> str:
    """Render an event as one rich markup line: header fields, then sorted ``key=value`` pairs."""
    level = str(event_dict.get("level", "")).upper()
    header: list[str] = []
    if "timestamp" in event_dict:
        header.append(f"[dim]{event_dict['timestamp']}[/]")
    if level:
        header.append(f"[{_LEVEL_COLORS.get(level, 'white')}]{level:>8}[/]")
    if "component" in event_dict:
        header.append(f"[bold]{escape(str(event_dict['component']))}[/]")
    header.append(f"[italic]{escape(str(event_dict.get('event', '')))}[/]")
    if "action" in event_dict:
        header.append(f"[bold italic]{escape(str(event_dict['action']))}[/]")
    arrow = _ARROWS.get(str(event_dict.get("direction")))
    if arrow:
        header.append(arrow)

    fields = [
        f"[blue]{key}[/]=[white]{escape(str(value))}[/]"
        for key, value in sorted(event_dict.items())
        if key not in _HEADER_KEYS
    ]
    return " ".join(header + fields)


def _pre_chain(app_settings: Settings) -> list[Processor]:
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if app_settings.log_verbose:
        callsite = (CallsiteParameter.MODULE, CallsiteParameter.FUNC_NAME, CallsiteParameter.LINENO)
        chain.append(structlog.processors.CallsiteParameterAdder(parameters=callsite))  # type: ignore[arg-type]
    return chain


def _formatter(renderer: Processor, app_settings: Settings) -> ProcessorFormatter:
    return ProcessorFormatter(processor=renderer, foreign_pre_chain=_pre_chain(app_settings))  # type: ignore[arg-type]


def _handlers_for(app_settings: Settings) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if app_settings.log_destination != "file":
        console = Console(file=sys.stdout, force_terminal=True, width=200)
        rich_handler = RichHandler(
            console=console,
            markup=True,
            rich_tracebacks=True,
            show_time=False,
            show_level=False,
            show_path=False,
        )
        rich_handler.setFormatter(_formatter(render_console_line, app_settings))
        handlers.append(rich_handler)
    if app_settings.log_destination != "stdout":
        log_path = Path(app_settings.log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        json_handler = logging.FileHandler(log_path, encoding="utf-8")
        json_handler.setFormatter(_formatter(structlog.processors.JSONRenderer(), app_settings))
        handlers.append(json_handler)
    return handlers


def configure_logging(app_settings: Settings | None = None, *, force: bool = False) -> None:
    """Install the handlers described by ``app_settings`` on the root logger.

    A call without arguments is a no-op once logging is configured. Passing
    settings, or ``force=True``, rebuilds the handlers; only handlers installed
    here are removed.
    """
    if _STATE.configured and app_settings is None and not force:
        return
    if app_settings is not None or force:
        _STATE.active_settings = app_settings or settings
    active = _STATE.active_settings

    root = logging.getLogger()
    for handler in _STATE.handlers:
        root.removeHandler(handler)
        handler.close()
    installed = _handlers_for(active)
    for handler in installed:
        root.addHandler(handler)
    root.setLevel(logging.getLevelNamesMapping().get(active.log_level.upper(), logging.INFO))

    structlog.reset_defaults()
    structlog.configure(
        processors=[
            *_pre_chain(active),
            structlog.processors.format_exc_info,
            ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=False,
    )
    _STATE.handlers = installed
    _STATE.configured = True


def get_logger(*, component: str | None = None) -> BoundLogger:
    """Return a structlog logger, bound to ``component`` when given."""
    configure_logging()
    logger: BoundLogger = structlog.get_logger()
    return logger.bind(component=component) if component else logger


class BaseComponent:
    """Mixin that gives a class a logger bound to its own name."""

    @cached_property
    def logger(self) -> BoundLogger:
        return get_logger(component=type(self).__name__)

    def log_start(self, action: str, **fields: LogValue) -> None:
        self.logger.info("start", action=action, **fields)

    def log_end(self, action: str, **fields: LogValue) -> None:
        self.logger.info("end", action=action, **fields)

    def log_io(self, direction: Literal["request", "response"], **payload: LogValue) -> None:
        """Log a wire payload after :func:`redact_payload`."""
        allow_content = _STATE.active_settings.allow_sensitive_logging
        self.logger.info("io", direction=direction, **redact_payload(payload, allow_content=allow_content))


def redact_payload(payload: Mapping[str, LogValue], *, allow_content: bool) -> dict[str, LogValue]:
    """Prepare a wire payload for logging.

    Base64 ``data`` blobs are always replaced by their size. Text, function
    arguments and function responses are hidden unless ``allow_content`` is
    set. Structural values such as roles, MIME types and model names are kept.
    """
    return {key: _redact(key, value, allow_content=allow_content) for key, value in payload.items()}


def _redact(key: str, value: LogValue, *, allow_content: bool) -> LogValue:
    if key in _BLOB_KEYS and isinstance(value, str):
        return f"<base64 length={len(value)} bytes={_decoded_size(value)}>"
    if isinstance(value, bytes):
        return f"<bytes length={len(value)}>"
    if key in _CONTENT_KEYS and not allow_content:
        if isinstance(value, str):
            return f"<redacted text length={len(value)}>"
        if isinstance(value, Mapping):
            return f"<redacted object keys={sorted(str(name) for name in value)}>"
    if isinstance(value, Mapping):
        mapping = cast("Mapping[str, LogValue]", value)
        return {str(name): _redact(str(name), nested, allow_content=allow_content) for name, nested in mapping.items()}
    if isinstance(value, list):
        return [_redact(key, item, allow_content=allow_content) for item in value]
    return value


def _decoded_size(encoded: str) -> int:
    return len(encoded) * 3 // 4 - encoded[-2:].count("=")
