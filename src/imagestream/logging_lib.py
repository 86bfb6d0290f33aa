from rich.console import Console
from rich.logging import RichHandler
import logging
from pathlib import Path
import json
from datetime import datetime, timezone
import os

_RESERVED = (
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename', 'module',
    'exc_info', 'exc_text', 'stack_info', 'lineno', 'funcName', 'created', 'msecs',
    'relativeCreated', 'thread', 'threadName', 'processName', 'process', 'taskName',
    'message', 'asctime',
)


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        if ts.endswith('+00:00'):
            ts = ts.replace('+00:00', 'Z')
        msg = record.msg if isinstance(record.msg, dict) and not record.args else record.getMessage()
        base = {
            'timestamp': ts,
            'level': record.levelname,
            'name': record.name,
            'message': msg,
        }
        extras = {k: v for k, v in record.__dict__.items() if k not in _RESERVED}
        if extras:
            base['extra'] = extras
        return json.dumps(base, default=str)


def _coerce_level(level: str | int | None) -> int:
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


ROOT_LOGGER = 'imagestream'


def setup_logger(name: str = ROOT_LOGGER, json_file: str | None = None, level: str | int | None = None):
    """Return a configured logger.

    Priority order for level:
      1. explicit level arg
      2. env IMAGESTREAM_LOG_LEVEL
      3. default INFO

    Only the package logger owns a console handler; module loggers propagate
    to it. Console output goes to stderr, stdout carries the model's text and
    the saved-file confirmations.
    """
    env_level = os.getenv('IMAGESTREAM_LOG_LEVEL')
    resolved_level = _coerce_level(level or env_level)
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        root.addHandler(RichHandler(console=Console(stderr=True)))
        root.propagate = False
    logger = logging.getLogger(name)
    if json_file:
        target = str(Path(json_file).resolve())
        if not any(isinstance(h, logging.FileHandler) and h.baseFilename == target for h in logger.handlers):
            add_json_file(logger, json_file)
    logger.setLevel(resolved_level)
    return logger


def add_json_file(logger: logging.Logger, json_file: str | Path) -> logging.FileHandler:
    p = Path(json_file)
    p.parent.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(str(p), encoding='utf-8')
    fh.setFormatter(JsonLineFormatter())
    logger.addHandler(fh)
    return fh


def reconfigure_log_level(level: str | int):
    lvl = _coerce_level(level)
    logging.getLogger('imagestream').setLevel(lvl)
    mgr = logging.Logger.manager
    for name, logger in mgr.loggerDict.items():  # type: ignore[attr-defined]
        if isinstance(logger, logging.Logger) and name.startswith('imagestream'):
            logger.setLevel(lvl)


def json_log_entry(logger, obj: dict):
    for h in logger.handlers:
        if isinstance(h, logging.FileHandler):
            record = logging.LogRecord(logger.name, logging.INFO, '', 0, json.dumps(obj, default=str), None, None)
            h.emit(record)
