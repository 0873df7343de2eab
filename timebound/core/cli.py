# timebound/core/cli.py
"""
CLI for boundary lookups, military timestamp conversion and waiting.

    timebound next minute
    timebound next hour --at 2023/06/15/10/10 --hour-strategy rounded
    timebound encode 1686872700000
    timebound decode 2023/06/15/23/45
    timebound wait second --interval-ms 200
"""

import argparse
import logging
import sys

from pydantic import ValidationError

from timebound.core.codec.military import decode, encode
from timebound.core.errors import ErrorCode, InvalidInputError, TimeboundError
from timebound.core.logging import get_logger
from timebound.core.models.settings import BoundaryKind, HourStrategy, SchedulerSettings
from timebound.core.scheduler.calculator import next_boundary
from timebound.core.scheduler.poller import poll_until_fire
from timebound.core.scheduler.rolling import RollingScheduler

EXIT_INTERRUPTED = 130


def setup_logging(loglevel: str) -> None:
    """Configure logging level for every timebound logger."""
    from timebound.core.logging import set_default_level

    level = getattr(logging, loglevel.upper(), logging.INFO)
    set_default_level(level)

    for name in logging.Logger.manager.loggerDict:
        if isinstance(name, str) and name.startswith('timebound.'):
            lgr = logging.getLogger(name)
            lgr.setLevel(level)
            for handler in lgr.handlers:
                handler.setLevel(level)


def _parse_instant_arg(raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise InvalidInputError(
            message=f"'{raw}' is not an integer millisecond timestamp",
            code=ErrorCode.INSTANT_NOT_NUMERIC,
            help_text='use --at YYYY/MM/DD/HH/mm for a military timestamp',
        ) from e


def next_command(args: argparse.Namespace) -> None:
    """Handle next command."""
    if args.at is not None:
        ref = decode(args.at)
    elif args.ms is not None:
        ref = _parse_instant_arg(args.ms)
    else:
        ref = None

    result = next_boundary(args.kind, ref, hour_strategy=args.hour_strategy)
    print(f'{result} {encode(result)}')


def encode_command(args: argparse.Namespace) -> None:
    """Handle encode command."""
    print(encode(_parse_instant_arg(args.instant)))


def decode_command(args: argparse.Namespace) -> None:
    """Handle decode command."""
    print(decode(args.timestamp))


def wait_command(args: argparse.Namespace) -> None:
    """Handle wait command: block until the next boundary of a kind fires."""
    logger = get_logger('cli')
    settings = SchedulerSettings(
        hour_strategy=args.hour_strategy,
        poll_interval_ms=args.interval_ms,
    )
    scheduler = RollingScheduler(args.kind, settings=settings)
    handle = poll_until_fire(scheduler)

    try:
        # Short waits keep the main thread responsive to Ctrl-C
        while not handle.wait(timeout=0.5):
            pass
    except KeyboardInterrupt:
        handle.cancel()
        logger.info(f'Cancelled waiting for next {scheduler.kind.value}')
        sys.exit(EXIT_INTERRUPTED)

    print(handle.result())


def _add_common(parser: argparse.ArgumentParser, default_level: str = 'WARNING') -> None:
    parser.add_argument(
        '--loglevel',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default=default_level,
        type=str.upper,
        help=f'Logging level (default: {default_level})',
    )


def _add_kind(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        'kind',
        choices=[k.value for k in BoundaryKind],
        help='Boundary kind',
    )
    parser.add_argument(
        '--hour-strategy',
        dest='hour_strategy',
        choices=[s.value for s in HourStrategy],
        default=HourStrategy.HOURLY.value,
        help='How hour boundaries are chosen (default: hourly)',
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='timebound',
        description='Time boundary calculator and rolling boundary scheduler',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  timebound next day
  timebound next hour --at 2023/06/15/23/45 --hour-strategy rounded
  timebound encode 1686872700000
  timebound decode 2023/06/15/23/45
  timebound wait minute --interval-ms 10000
""",
    )
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    next_parser = subparsers.add_parser('next', help='Print the next boundary')
    _add_kind(next_parser)
    ref_group = next_parser.add_mutually_exclusive_group()
    ref_group.add_argument('--at', help='Reference as military timestamp (UTC)')
    ref_group.add_argument('--ms', help='Reference as epoch milliseconds')
    _add_common(next_parser)

    encode_parser = subparsers.add_parser(
        'encode', help='Epoch milliseconds -> military timestamp'
    )
    encode_parser.add_argument('instant', help='Epoch milliseconds')
    _add_common(encode_parser)

    decode_parser = subparsers.add_parser(
        'decode', help='Military timestamp -> epoch milliseconds'
    )
    decode_parser.add_argument('timestamp', help='YYYY/MM/DD/HH/mm (UTC)')
    _add_common(decode_parser)

    wait_parser = subparsers.add_parser(
        'wait', help='Block until the next boundary fires'
    )
    _add_kind(wait_parser)
    wait_parser.add_argument(
        '--interval-ms',
        dest='interval_ms',
        type=int,
        default=None,
        help='Polling interval in milliseconds (default: a sixth of the period)',
    )
    _add_common(wait_parser, default_level='INFO')

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.loglevel)

    try:
        match args.command:
            case 'next':
                next_command(args)
            case 'encode':
                encode_command(args)
            case 'decode':
                decode_command(args)
            case 'wait':
                wait_command(args)
    except TimeboundError as e:
        print(e.format_rust_style(), file=sys.stderr)
        sys.exit(1)
    except ValidationError as e:
        print(f'error: invalid settings\n{e}', file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
