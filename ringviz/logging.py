# ringviz/logging.py
from __future__ import annotations
import logging as _logging
import os
import re
import sys

_ANSI = {
    "reset": "\x1b[0m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "red": "\x1b[31m",
    "cyan": "\x1b[36m",
    "gray": "\x1b[90m",
}
_ANSI_PAT = re.compile(r"\x1b\[[0-9;]*m")

ROOT_LOGGER = "ringviz"

_COLOR_ENABLED: bool = False
_LOGGER = _logging.getLogger(ROOT_LOGGER)


def _supports_color() -> bool:
    return sys.stdout.isatty() and (os.environ.get("TERM") not in (None, "dumb"))


def c(text: str, color: str) -> str:
    if not _COLOR_ENABLED:
        return text
    return f"{_ANSI.get(color, '')}{text}{_ANSI['reset']}"


def scope_of(record: _logging.LogRecord) -> str:
    """'ring' for a record from 'ringviz.ring', '' for the root logger."""
    if record.name.startswith(ROOT_LOGGER + "."):
        return record.name[len(ROOT_LOGGER) + 1:]
    return ""


class _ScopeFormatter(_logging.Formatter):
    """Prefixes the plot/component scope as '[ring] '. File output drops colour codes."""

    def __init__(self, fmt: str, *, strip_ansi: bool = False):
        super().__init__(fmt, datefmt="%H:%M:%S")
        self.strip_ansi = strip_ansi

    def format(self, record: _logging.LogRecord) -> str:
        scope = scope_of(record)
        record.scope = f"[{scope}] " if scope else ""
        text = super().format(record)
        return _ANSI_PAT.sub("", text) if self.strip_ansi else text


def setup_logging(verbosity: int = 0, log_file: str | None = None, *, color: bool | None = None) -> None:
    """Configure the 'ringviz' logger tree. Verbosity: 0→WARNING, 1→INFO, 2+→DEBUG."""
    global _COLOR_ENABLED
    _COLOR_ENABLED = _supports_color() if color is None else color

    level = _logging.WARNING
    if verbosity >= 2:
        level = _logging.DEBUG
    elif verbosity == 1:
        level = _logging.INFO

    for h in list(_LOGGER.handlers):
        h.close()
    _LOGGER.handlers.clear()
    _LOGGER.setLevel(level)

    sh = _logging.StreamHandler(stream=sys.stdout)
    sh.setLevel(level)
    sh.setFormatter(_ScopeFormatter("%(scope)s%(message)s"))
    _LOGGER.addHandler(sh)

    if log_file:
        fh = _logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(_ScopeFormatter("%(asctime)s %(levelname)-7s %(scope)s%(message)s", strip_ansi=True))
        _LOGGER.addHandler(fh)


def get_logger(scope: str | None = None) -> _logging.Logger:
    """Child logger per plot type or component, e.g. get_logger('ring') -> 'ringviz.ring'."""
    return _LOGGER.getChild(scope) if scope else _LOGGER


def log_debug(msg: str, *, scope: str | None = None) -> None:
    get_logger(scope).debug(msg)


def log_warn(msg: str, *, scope: str | None = None) -> None:
    get_logger(scope).warning(f"{c('⚠', 'yellow')} {msg}")


def log_err(msg: str, *, scope: str | None = None) -> None:
    get_logger(scope).error(f"{c('✖', 'red')} {msg}")


def log_ok(msg: str) -> None:
    _LOGGER.info(f"{c('✓', 'green')} {msg}")


def log_step(label: str, value: str = "") -> None:
    arrow = c("→", "cyan")
    gray = c(value, "gray") if value else ""
    _LOGGER.info(f"{arrow} {label}{(' ' + gray) if gray else ''}")
