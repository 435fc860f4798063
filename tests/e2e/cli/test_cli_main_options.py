"""End-to-end CLI tests for the top-level `lakeblocks` command options.

These tests exercise verbosity flags, logger-level overrides, debug
formatting and the flight recorder by invoking the test-only `log-demo`
command, plus the version option.
"""

import re
from pathlib import Path

import pytest

from lakeblocks import __version__
from lakeblocks.entrypoints.cli.main import lakeblocks

# pylint: disable=unused-argument


def assert_in_output(pattern: str, output: str) -> None:
    if not re.search(pattern, output, re.MULTILINE):
        raise AssertionError(f"Pattern '{pattern}' not found in output:\n{output}")


def assert_not_in_output(pattern: str, output: str) -> None:
    if re.search(pattern, output, re.MULTILINE):
        raise AssertionError(f"Pattern '{pattern}' found in output:\n{output}")


@pytest.mark.parametrize(
    ("flags", "shown", "hidden"),
    [
        ([], "WARNING", "INFO"),
        (["-v"], "INFO", "DEBUG"),
        (["-q"], "ERROR", "WARNING"),
        (["-qq"], "CRITICAL", "ERROR"),
    ],
    ids=["default", "verbose", "quiet", "very-quiet"],
)
def test_verbosity_flags(registered_log_demo, runner, fs, flags, shown, hidden):
    result = runner.invoke(lakeblocks, ["--no-flight-recorder", *flags, "log-demo"])
    assert result.exit_code == 0
    assert_in_output(shown, result.output)
    assert_not_in_output(hidden, result.output)


def test_vv_shows_debug(registered_log_demo, runner, fs):
    result = runner.invoke(lakeblocks, ["--no-flight-recorder", "-vv", "log-demo"])
    assert result.exit_code == 0
    assert_in_output("DEBUG", result.output)


@pytest.mark.parametrize(
    ("env", "cli_args"),
    [
        ({}, ["-vv", "-L", "some.thirdparty=INFO"]),
        ({"LAKEBLOCKS_LOGGER_LEVELS": "some.thirdparty=INFO"}, ["-vv"]),
    ],
    ids=["cli-flag", "env-var"],
)
def test_logger_level_silences_debug(registered_log_demo, runner, fs, env, cli_args):
    result = runner.invoke(
        lakeblocks, ["--no-flight-recorder", *cli_args, "log-demo"], env=env
    )
    assert result.exit_code == 0
    assert_not_in_output("This is a debug-level third-party test message.", result.output)
    assert_in_output("This is an info-level third-party test message.", result.output)


def test_third_party_records_are_prefixed(registered_log_demo, runner, fs):
    result = runner.invoke(lakeblocks, ["--no-flight-recorder", "-v", "log-demo"])
    assert_in_output(r"\[some\] This is an info-level third-party", result.output)


def test_debug_mode_shows_paths(registered_log_demo, runner, fs):
    result = runner.invoke(lakeblocks, ["--no-flight-recorder", "--debug", "log-demo"])
    assert result.exit_code == 0
    assert_in_output(r"conftest\.py:\d+\b", result.output)


def test_debug_mode_is_off_by_default(registered_log_demo, runner, fs):
    result = runner.invoke(lakeblocks, ["--no-flight-recorder", "log-demo"])
    assert result.exit_code == 0
    assert_not_in_output(r"conftest\.py:\d+\b", result.output)


def test_flight_recorder_flush_on_warning(registered_log_demo, runner, fs):
    """Buffered DEBUG records reach the log file when a WARNING occurs."""
    log_path = "logs/flight_recorder.log"
    result = runner.invoke(
        lakeblocks,
        ["--log-path", log_path, "-L", "some.thirdparty=INFO", "log-demo"],
    )
    assert result.exit_code == 0
    content = Path(log_path).read_text(encoding="utf-8")
    assert_in_output("This is a debug-level test message.", content)
    assert_in_output(r"\[\d+:MainThread\]", content)
    assert_not_in_output("This is a debug-level third-party test message.", content)
    assert_in_output("This is an info-level third-party test message.", content)
    assert_in_output("This is a critical-level test message.", content)
    # buffered after the last flush and never forced out
    assert_not_in_output("This is a final debug-level test message.", content)


@pytest.mark.parametrize(
    ("env", "cli_args"),
    [({}, ["--force-flush"]), ({"LAKEBLOCKS_FORCE_FLUSH_FLIGHT_RECORDER": "true"}, [])],
    ids=["cli-flag", "env-var"],
)
def test_flight_recorder_force_flush(registered_log_demo, runner, fs, env, cli_args):
    log_path = "flight_recorder.log"
    result = runner.invoke(
        lakeblocks, ["--log-path", log_path, *cli_args, "log-demo"], env=env
    )
    assert result.exit_code == 0
    content = Path(log_path).read_text(encoding="utf-8")
    assert_in_output("This is a final debug-level test message.", content)


@pytest.mark.parametrize(
    ("env", "cli_args"),
    [({}, ["--no-flight-recorder"]), ({"LAKEBLOCKS_FLIGHT_RECORDER": "0"}, [])],
    ids=["cli-flag", "env-var"],
)
def test_flight_recorder_can_be_disabled(registered_log_demo, runner, fs, env, cli_args):
    log_path = "flight_recorder.log"
    result = runner.invoke(
        lakeblocks, ["--log-path", log_path, *cli_args, "log-demo"], env=env
    )
    assert result.exit_code == 0
    assert not Path(log_path).exists()


def test_version(runner):
    result = runner.invoke(lakeblocks, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
