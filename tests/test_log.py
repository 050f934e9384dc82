"""Tests for the logging capability."""

import pytest

from bsa_toolkit.log import ConsoleLogger, ModLogger, SilentLogger, create_logger


class TestConsoleLogger:
    """Tests for ConsoleLogger."""

    def test_debug_needs_verbose(self, capsys):
        ConsoleLogger().debug("hidden")
        ConsoleLogger(verbose=True).debug("shown")
        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "[DEBUG] shown" in out

    def test_levels(self, capsys):
        logger = ConsoleLogger()
        logger.info("plain")
        logger.warning("careful")
        logger.error("broken")
        captured = capsys.readouterr()
        assert "plain" in captured.out
        assert "[WARN] careful" in captured.out
        assert "[ERROR] broken" in captured.err

    def test_json_output_is_silent(self, capsys):
        logger = ConsoleLogger(verbose=True, json_output=True)
        logger.debug("a")
        logger.info("b")
        logger.error("c", ValueError("d"))
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""


class TestSilentLogger:
    """Tests for SilentLogger and the abstract base."""

    def test_prints_nothing(self, capsys):
        logger = SilentLogger()
        logger.debug("a")
        logger.info("b")
        logger.warning("c")
        logger.error("d", ValueError("e"))
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_base_is_abstract(self):
        with pytest.raises(TypeError):
            ModLogger()

    def test_partial_subclass_is_abstract(self):
        class DebugOnly(ModLogger):
            def debug(self, message):
                pass

        with pytest.raises(TypeError):
            DebugOnly()


def test_create_logger():
    assert isinstance(create_logger(json_output=True, verbose=True), SilentLogger)
    assert isinstance(create_logger(json_output=False, verbose=False), ConsoleLogger)
