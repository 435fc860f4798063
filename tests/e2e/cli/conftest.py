"""Fixtures and test helpers for end-to-end CLI tests.

Provides a test-only `log-demo` command that emits log messages at every
level, fixtures to register it, a CliRunner, an isolated filesystem, and a
``local://`` store location rooted in a temporary directory.
"""

import logging

import click
import pytest
from click.testing import CliRunner

from lakeblocks.entrypoints.cli.main import lakeblocks

# pylint: disable=redefined-outer-name,unused-argument

LOCATION = "local://e2e/blocks"


@click.command()
def log_demo():
    """Emit representative log messages for CLI/flight-recorder tests."""
    logger = logging.getLogger("lakeblocks.demo")
    logger.debug("This is a debug-level test message.")
    logger.info("This is an info-level test message.")
    logger.warning("This is a warning-level test message.")
    logger.error("This is an error-level test message.")
    logger.critical("This is a critical-level test message.")
    third_party_logger = logging.getLogger("some.thirdparty")
    third_party_logger.debug("This is a debug-level third-party test message.")
    third_party_logger.info("This is an info-level third-party test message.")
    third_party_logger.warning("This is a warning-level third-party test message.")
    logger.debug("This is a final debug-level test message.")


def _remove_command_everywhere(group, name: str) -> None:
    """Remove a command from a Click group and any Click-Extra sections."""
    group.commands.pop(name, None)
    if hasattr(group, "_default_section"):
        group._default_section.commands.pop(name, None)  # pylint: disable=protected-access
    for sec in getattr(group, "_sections", []):
        getattr(sec, "commands", {}).pop(name, None)


@pytest.fixture
def registered_log_demo():
    """Register the 'log-demo' command for the duration of a test."""
    lakeblocks.add_command(log_demo, name="log-demo")
    try:
        yield
    finally:
        _remove_command_everywhere(lakeblocks, "log-demo")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fs(runner):
    """Run the test inside ``runner.isolated_filesystem()``."""
    with runner.isolated_filesystem():
        yield


@pytest.fixture
def location(monkeypatch, isolated_local_base):
    """Set LAKEBLOCKS_LOCATION to a fresh local store and return it."""
    monkeypatch.setenv("LAKEBLOCKS_LOCATION", LOCATION)
    return LOCATION


@pytest.fixture
def invoke(runner, fs, location):
    """Invoke ``lakeblocks`` without the flight recorder touching the user log dir."""

    def _invoke(*args, **kwargs):
        return runner.invoke(lakeblocks, ["--no-flight-recorder", *args], **kwargs)

    return _invoke
