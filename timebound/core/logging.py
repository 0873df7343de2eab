# timebound/core/logging.py
"""
Per-component loggers: 'timebound.<component>' writing to stdout.

Lines look like

    [10:11:00.004] [scheduler]  [INFO]    minute boundary reached: 2023/06/15/10/11

The clock column keeps milliseconds because fire lag is usually well under a
second. Colors are used on a terminal only; NO_COLOR turns them off and
TIMEBOUND_FORCE_COLOR turns them on. TIMEBOUND_LOG_LEVEL sets the starting
level (the CLI's --loglevel overrides it).
"""

import logging
import os
import sys
from datetime import datetime
from typing import Optional

from timebound.core.errors import _env_flag

_RESET = '\033[0m'
_TIME_COLOR = '\033[94m'
_TEXT_COLOR = '\033[97m'
_LEVEL_COLORS = {
    logging.DEBUG: '\033[90m',
    logging.INFO: '\033[92m',
    logging.WARNING: '\033[93m',
    logging.ERROR: '\033[91m',
    logging.CRITICAL: '\033[1;91m',
}

# [scheduler] is the widest component tag, [CRITICAL] the widest level tag
COMPONENT_WIDTH = 13
LEVEL_WIDTH = 11


def _level_from_env() -> int:
    name = os.environ.get('TIMEBOUND_LOG_LEVEL', '').upper()
    level = logging.getLevelName(name) if name else logging.INFO
    return level if isinstance(level, int) else logging.INFO


_default_level: int = _level_from_env()


def stream_wants_color(stream: object) -> bool:
    if _env_flag('TIMEBOUND_FORCE_COLOR'):
        return True
    if os.environ.get('NO_COLOR') is not None:
        return False
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())


class ColoredFormatter(logging.Formatter):
    """Tabular formatter: [time.ms] [component] [LEVEL] message"""

    def __init__(self, use_colors: Optional[bool] = None):
        super().__init__()
        self.use_colors = stream_wants_color(sys.stdout) if use_colors is None else use_colors

    def _paint(self, color: str, text: str) -> str:
        return f'{color}{text}{_RESET}' if self.use_colors else text

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        stamp = datetime.fromtimestamp(record.created)
        return f'{stamp:%H:%M:%S}.{int(record.msecs):03d}'

    def format(self, record: logging.LogRecord) -> str:
        component = record.name.removeprefix('timebound.')
        level_color = _LEVEL_COLORS.get(record.levelno, _TEXT_COLOR)

        line = ' '.join(
            [
                self._paint(_TIME_COLOR, f'[{self.formatTime(record)}]'),
                self._paint(_TEXT_COLOR, f'[{component}]'.ljust(COMPONENT_WIDTH))
                + self._paint(level_color, f'[{record.levelname}]'.ljust(LEVEL_WIDTH))
                + self._paint(_TEXT_COLOR, record.getMessage()),
            ]
        )

        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def set_default_level(level: int) -> None:
    """Level given to loggers created from now on."""
    global _default_level
    _default_level = level


def get_logger(component_name: str) -> logging.Logger:
    """The 'timebound.<component_name>' logger, configured on first use."""
    logger = logging.getLogger(f'timebound.{component_name}')

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ColoredFormatter())
        handler.setLevel(_default_level)
        logger.addHandler(handler)
        logger.setLevel(_default_level)
        logger.propagate = False

    return logger
