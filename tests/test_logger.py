"""Tests for console logging setup."""

from __future__ import annotations

import io

import pytest

from cdnsync.utils.logger import get_logger, set_environment, setup_logging


class FakeTerminal(io.StringIO):
    def isatty(self):
        return True


@pytest.fixture(autouse=True)
def reset_environment():
    yield
    set_environment(None)


def test_plain_output_when_not_a_terminal():
    stream = io.StringIO()
    setup_logging(stream=stream)

    get_logger("tests.logger").warning("Retrying %s", "index.html")

    assert stream.getvalue() == "[WARNING] Retrying index.html\n"


def test_colour_on_a_terminal():
    stream = FakeTerminal()
    setup_logging(stream=stream)

    get_logger("tests.logger").error("boom")

    assert "\x1b[" in stream.getvalue()
    assert "boom" in stream.getvalue()


def test_environment_tag():
    stream = io.StringIO()
    setup_logging(stream=stream)
    set_environment("prd")

    get_logger("tests.logger").info("Planned 2 upload(s)")

    assert stream.getvalue() == "[INFO] [prd] Planned 2 upload(s)\n"


def test_levels():
    stream = io.StringIO()
    setup_logging(quiet=True, stream=stream)
    log = get_logger("tests.logger")

    log.info("hidden")
    log.warning("shown")

    assert "hidden" not in stream.getvalue()
    assert "shown" in stream.getvalue()

    setup_logging(verbose=True, stream=stream)
    log.debug("detail")
    assert "detail" in stream.getvalue()


def test_repeated_setup_keeps_one_handler():
    first, second = io.StringIO(), io.StringIO()
    setup_logging(stream=first)
    setup_logging(stream=second)

    get_logger("tests.logger").warning("once")

    assert first.getvalue() == ""
    assert second.getvalue().count("once") == 1


def test_names_are_namespaced():
    assert get_logger("planner").name == "cdnsync.planner"
    assert get_logger("cdnsync.cli").name == "cdnsync.cli"
