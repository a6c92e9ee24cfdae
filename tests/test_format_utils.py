"""Tests for the formatting helpers."""

import pytest

from web_transcoder.utils.format_utils import format_seconds, formatted_size, parse_duration


class TestParseDuration:
    """Tests for parse_duration."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("3600.5", 3600.5),
            ("01:00:00.500", 3600.5),
            ("02:03", 123.0),
            ("100:00:00", 360000.0),
        ],
    )
    def test_supported_formats(self, value, expected):
        assert parse_duration(value) == expected

    def test_unparseable_returns_zero(self, caplog):
        assert parse_duration("soon") == 0.0
        assert "Could not parse duration" in caplog.text


class TestFormatting:
    """Tests for the progress display helpers."""

    def test_format_seconds(self):
        assert format_seconds(65.9) == "00:01:05"
        assert format_seconds(7261) == "02:01:01"
        assert format_seconds(None) == "--:--:--"

    def test_format_seconds_clamps_negative_positions(self):
        assert format_seconds(-3.0) == "00:00:00"

    @pytest.mark.parametrize(
        "size, expected",
        [
            (0, "0 B"),
            (512, "512 B"),
            (1536, "1.5 KB"),
            (2097152, "2 MB"),
            (5 * 1024**4, "5120 GB"),
            (-5, "0 B"),
            (None, "?"),
        ],
    )
    def test_formatted_size(self, size, expected):
        assert formatted_size(size) == expected
