"""Tests for the leveled output channel."""

import io

import pytest

from ctxshell.output import OutputChannel, OutputLevel, aggregate_messages, format_table
from ctxshell.results import OutputMessage, Severity


@pytest.fixture
def channel(stream):
    return OutputChannel(stream)


class TestLevels:
    """Test level filtering."""

    def test_normal_level(self, channel, stream):
        """Test output at the normal level."""
        channel.info("i")
        channel.warn("w")
        channel.error("e")
        channel.verbose("v")
        channel.debug("d")

        assert stream.getvalue() == "i\nWARNING: w\nERROR: e\n"

    def test_quiet_keeps_errors_only(self, stream):
        """Test that quiet output shows only errors."""
        channel = OutputChannel(stream, OutputLevel.QUIET)
        channel.info("i")
        channel.warn("w")
        channel.error("e")

        assert stream.getvalue() == "ERROR: e\n"

    def test_debug_level_shows_everything(self, stream):
        """Test that debug output shows every level."""
        channel = OutputChannel(stream, OutputLevel.DEBUG)
        channel.verbose("v")
        channel.debug("d")

        assert stream.getvalue() == "v\nDEBUG: d\n"

    def test_from_name(self):
        """Test looking up levels by name."""
        assert OutputLevel.from_name(" Verbose ") is OutputLevel.VERBOSE
        with pytest.raises(ValueError, match="Unknown output level: loud"):
            OutputLevel.from_name("loud")

    def test_defaults_to_stdout(self, capsys):
        """Test that output goes to stdout by default."""
        OutputChannel().info("hello")
        assert capsys.readouterr().out == "hello\n"


class TestStructured:
    """Test JSON and table rendering."""

    def test_write_json(self, channel, stream):
        """Test JSON output."""
        channel.write_json({"a": 1})
        assert stream.getvalue() == '{\n  "a": 1\n}\n'

    def test_write_json_unencodable(self, channel, stream):
        """Test that values json cannot encode print an error."""
        channel.write_json({"a": object()})
        assert stream.getvalue().startswith("ERROR: failed to encode json")

    def test_format_table(self):
        """Test table formatting."""
        lines = format_table(["ID", "Name"], [["1", "alpha"], ["22", "b"]])

        assert lines == [
            "| ID | Name  |",
            "  1    alpha",
            "  22   b",
        ]

    def test_write_table_skips_without_headers(self, channel, stream):
        """Test that a table without headers prints nothing."""
        channel.write_table([], [["x"]])
        assert stream.getvalue() == ""

    def test_buffer_mirrors_output(self, channel):
        """Test that the buffer holds everything written."""
        channel.info("one")
        assert channel.getvalue() == "one\n"
        channel.reset_buffer()
        assert channel.getvalue() == ""


class TestAggregate:
    """Test message aggregation."""

    def test_stable_severity_order(self, channel, stream):
        """Test stable ordering of messages by severity."""
        aggregate_messages(
            channel,
            [
                OutputMessage(Severity.WARNING, "w1"),
                OutputMessage(Severity.ERROR, "e1"),
                OutputMessage(Severity.INFO, "i1"),
                OutputMessage(Severity.WARNING, "w2"),
                OutputMessage("info", "i2"),
            ],
        )

        assert stream.getvalue() == "i1\ni2\nWARNING: w1\nWARNING: w2\nERROR: e1\n"

    def test_message_level_coerced(self):
        """Test that string levels become Severity values."""
        assert OutputMessage("error", "x").level is Severity.ERROR
