"""Tests for the timebound CLI (argument parsing and command output)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from timebound.core import cli
from timebound.core.cli import build_parser, main

pytestmark = pytest.mark.unit


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    code = exc_info.value.code
    return 0 if code is None else int(code)


class TestParser:
    def test_next_requires_known_kind(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(['next', 'fortnight'])

    def test_at_and_ms_are_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(['next', 'day', '--at', '2023/06/15/10/10', '--ms', '0'])

    def test_wait_defaults(self) -> None:
        args = build_parser().parse_args(['wait', 'minute'])

        assert args.interval_ms is None
        assert args.hour_strategy == 'hourly'
        assert args.loglevel == 'INFO'

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run([]) == 1
        assert 'usage: timebound' in capsys.readouterr().out


class TestCommands:
    def test_next_hour_rounded_at_military(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(['next', 'hour', '--at', '2023/06/15/23/45', '--hour-strategy', 'rounded'])

        assert capsys.readouterr().out.strip() == '1686873600000 2023/06/16/00/00'

    def test_next_minute_from_ms(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(['next', 'minute', '--ms', '1686823830000'])

        assert capsys.readouterr().out.strip() == '1686823860000 2023/06/15/10/11'

    def test_encode(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(['encode', '1686872700000'])

        assert capsys.readouterr().out.strip() == '2023/06/15/23/45'

    def test_decode(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(['decode', '2023/06/15/23/45'])

        assert capsys.readouterr().out.strip() == '1686872700000'

    def test_decode_error_exits_1_with_rust_style(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert _run(['decode', '2023/06/15']) == 1

        assert 'error[E200]' in capsys.readouterr().err

    def test_encode_non_integer(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(['encode', 'soon']) == 1

        assert 'error[E100]' in capsys.readouterr().err

    def test_wait_prints_fired_timestamp(self, capsys: pytest.CaptureFixture[str]) -> None:
        handle = MagicMock()
        handle.wait.return_value = True
        handle.result.return_value = '2023/06/15/10/11'

        with patch.object(cli, 'poll_until_fire', return_value=handle) as mock_poll:
            main(['wait', 'minute', '--interval-ms', '500'])

        scheduler = mock_poll.call_args.args[0]
        assert scheduler.settings.poll_interval_ms == 500
        assert capsys.readouterr().out.strip().endswith('2023/06/15/10/11')

    def test_wait_ctrl_c_cancels(self) -> None:
        handle = MagicMock()
        handle.wait.side_effect = KeyboardInterrupt

        with patch.object(cli, 'poll_until_fire', return_value=handle):
            assert _run(['wait', 'second']) == cli.EXIT_INTERRUPTED

        handle.cancel.assert_called_once()

    def test_wait_rounded_hour_is_config_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(['wait', 'hour', '--hour-strategy', 'rounded']) == 1

        assert 'error[E301]' in capsys.readouterr().err

    def test_wait_invalid_interval(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(['wait', 'minute', '--interval-ms', '0']) == 1

        assert 'invalid settings' in capsys.readouterr().err
