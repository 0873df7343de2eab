"""Rust-style error display for timebound input, parse and config errors."""

from __future__ import annotations

import inspect
import linecache
import os
import sys
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Frames under this directory belong to the library, not to the caller.
_TIMEBOUND_PKG_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class ErrorCode(str, Enum):
    """Error codes for timebound errors.

    Organized by category:
    - E100-E199: Invalid instant / argument input
    - E200-E299: Military timestamp parsing
    - E300-E399: Scheduler configuration
    - E400-E499: Polling lifecycle
    """

    # Input (E100-E199)
    INSTANT_NOT_NUMERIC = 'E100'
    INSTANT_NOT_FINITE = 'E101'
    INSTANT_OUT_OF_RANGE = 'E102'
    UNKNOWN_BOUNDARY_KIND = 'E103'
    INVALID_INTERVAL = 'E104'

    # Parse (E200-E299)
    MILITARY_FIELD_COUNT = 'E200'
    MILITARY_NOT_NUMERIC = 'E201'
    MILITARY_INVALID_DATE = 'E202'

    # Config (E300-E399)
    CONFIG_INVALID_DEPTH = 'E300'
    CONFIG_INVALID_HOUR_STRATEGY = 'E301'
    CONFIG_INVALID_POLL_INTERVAL = 'E302'

    # Polling (E400-E499)
    POLL_CANCELLED = 'E400'
    POLL_TIMEOUT = 'E401'


class _Colors:
    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[91m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    DIM = '\033[2m'


class _NoColors:
    RESET = ''
    BOLD = ''
    RED = ''
    BLUE = ''
    CYAN = ''
    GREEN = ''
    DIM = ''


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').lower() in ('1', 'true', 'yes')


def _should_use_colors() -> bool:
    """Determine if colors should be used in output."""
    if _env_flag('TIMEBOUND_FORCE_COLOR'):
        return True

    # https://no-color.org/
    if os.environ.get('NO_COLOR') is not None:
        return False

    return hasattr(sys.stderr, 'isatty') and sys.stderr.isatty()


def _should_show_verbose() -> bool:
    return _env_flag('TIMEBOUND_VERBOSE')


def _should_use_plain_errors() -> bool:
    return _env_flag('TIMEBOUND_PLAIN_ERRORS')


@dataclass
class SourceLocation:
    """Where in user code a timebound call was made."""

    file: str
    line: int

    @classmethod
    def from_frame(cls, frame: Any) -> SourceLocation:
        return cls(file=frame.f_code.co_filename, line=frame.f_lineno)

    def get_source_line(self) -> str | None:
        line = linecache.getline(self.file, self.line)
        return line.rstrip('\n') if line else None

    def format_short(self) -> str:
        return f'{self.file}:{self.line}'


@dataclass
class TimeboundError(Exception):
    """Base exception for timebound errors.

    Carries an error code, the calling location in user code, free-form
    notes and a help line, and renders them rustc-style.
    """

    message: str
    code: ErrorCode | None = None
    location: SourceLocation | None = None
    notes: list[str] = field(default_factory=lambda: [])
    help_text: str | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

        if self.location is None:
            user_frame = _find_user_frame()
            if user_frame is not None:
                self.location = SourceLocation.from_frame(user_frame)

    def with_note(self, note: str) -> TimeboundError:
        """Add a note to the error (fluent API)."""
        self.notes.append(note)
        return self

    def with_help(self, help_text: str) -> TimeboundError:
        """Set help text (fluent API)."""
        self.help_text = help_text
        return self

    def format_rust_style(self, use_colors: bool | None = None) -> str:
        if use_colors is None:
            use_colors = _should_use_colors()

        c = _Colors if use_colors else _NoColors
        code_part = f'[{self.code.value}]' if self.code else ''
        lines: list[str] = [
            '',
            f'{c.BOLD}{c.RED}error{code_part}:{c.RESET} {self.message}',
        ]

        if self.location:
            lines.append(
                f'  {c.BLUE}-->{c.RESET} {c.CYAN}{self.location.format_short()}{c.RESET}'
            )
            source_line = self.location.get_source_line()
            if source_line:
                line_num = str(self.location.line)
                gutter = ' ' * len(line_num)
                stripped = source_line.lstrip()
                indent = len(source_line) - len(stripped)
                lines.append(f'   {c.BLUE}{gutter}|{c.RESET}')
                lines.append(f'   {c.BLUE}{line_num}|{c.RESET} {source_line}')
                lines.append(
                    f'   {c.BLUE}{gutter}|{c.RESET} '
                    f'{c.RED}{" " * indent}{"^" * len(stripped)}{c.RESET}'
                )

        for note in self.notes:
            first, *rest = note.split('\n')
            lines.append(f'   {c.BLUE}={c.RESET} {c.BOLD}{c.BLUE}note{c.RESET}: {first}')
            lines.extend(f'          {extra}' for extra in rest)

        if self.help_text:
            lines.append('')
            lines.append(f'   {c.BLUE}={c.RESET} {c.BOLD}{c.GREEN}help{c.RESET}:')
            lines.extend(f'        {h}' for h in self.help_text.split('\n'))

        return '\n'.join(lines)

    def __str__(self) -> str:
        # Plain text so the message is safe in logs and non-terminal sinks.
        return self.format_rust_style(use_colors=False)


_original_excepthook = sys.excepthook


def _timebound_excepthook(
    exc_type: type[BaseException],
    exc_value: BaseException,
    exc_tb: Any,
) -> None:
    """Print TimeboundError uncaught exceptions in Rust style."""
    if _should_use_plain_errors() or not isinstance(exc_value, TimeboundError):
        _original_excepthook(exc_type, exc_value, exc_tb)
        return

    print(exc_value.format_rust_style(), file=sys.stderr)
    if _should_show_verbose():
        c = _Colors if _should_use_colors() else _NoColors
        print(file=sys.stderr)
        print(f'{c.DIM}Full traceback (TIMEBOUND_VERBOSE=1):{c.RESET}', file=sys.stderr)
        traceback.print_exception(exc_type, exc_value, exc_tb, file=sys.stderr)


def install_error_handler() -> None:
    sys.excepthook = _timebound_excepthook


def uninstall_error_handler() -> None:
    sys.excepthook = _original_excepthook


# =============================================================================
# Specific Error Classes
# =============================================================================


@dataclass
class InvalidInputError(TimeboundError):
    """Raised when an instant or argument is not usable (NaN, wrong type, range)."""

    pass


@dataclass
class ParseError(TimeboundError):
    """Raised when a military timestamp string is malformed."""

    pass


@dataclass
class ConfigurationError(TimeboundError):
    """Raised when scheduler settings are invalid."""

    pass


@dataclass
class PollCancelledError(TimeboundError):
    """Raised by PollHandle.result() when the poll was cancelled before firing."""

    pass


@dataclass
class PollTimeoutError(TimeboundError):
    """Raised by PollHandle.result() when the wait timed out."""

    pass


# =============================================================================
# Phase-Gated Error Collection
# =============================================================================


class ValidationReport:
    """Collects several TimeboundError instances from one validation phase."""

    def __init__(self, phase_name: str) -> None:
        self.phase_name: str = phase_name
        self.errors: list[TimeboundError] = []

    def add(self, error: TimeboundError) -> None:
        self.errors.append(error)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def format_rust_style(self, use_colors: bool | None = None) -> str:
        if use_colors is None:
            use_colors = _should_use_colors()

        c = _Colors if use_colors else _NoColors
        parts = [e.format_rust_style(use_colors=use_colors) for e in self.errors]
        parts.append(
            f'\n{c.BOLD}{c.RED}error{c.RESET}: aborting due to '
            f'{len(self.errors)} previous errors'
        )
        return '\n'.join(parts)

    def __str__(self) -> str:
        return self.format_rust_style(use_colors=False)


@dataclass
class MultipleValidationErrors(TimeboundError):
    """Wraps a ValidationReport holding two or more errors."""

    report: ValidationReport = field(default_factory=lambda: ValidationReport(''))

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f'aborting due to {len(self.report.errors)} previous errors'
        # Location lives on each collected error.
        super(TimeboundError, self).__init__(self.message)

    def format_rust_style(self, use_colors: bool | None = None) -> str:
        return self.report.format_rust_style(use_colors=use_colors)

    def __str__(self) -> str:
        return self.format_rust_style(use_colors=False)


def raise_collected(report: ValidationReport) -> None:
    """Raise what a report collected.

    - 0 errors: returns normally
    - 1 error: raises that error unchanged
    - 2+ errors: raises MultipleValidationErrors wrapping the report
    """
    count = len(report.errors)
    if count == 0:
        return
    if count == 1:
        raise report.errors[0]
    raise MultipleValidationErrors(
        message=f'aborting due to {count} previous errors',
        report=report,
    )


def _find_user_frame() -> Any | None:
    """Return the first stack frame outside timebound and site-packages."""
    frame = inspect.currentframe()
    while frame is not None:
        filename = frame.f_code.co_filename
        if (
            not filename.startswith('<')
            and not filename.startswith(_TIMEBOUND_PKG_DIR)
            and '/site-packages/' not in filename
        ):
            return frame
        frame = frame.f_back
    return None
