"""Tests for normalizer functions."""

import pytest
import structlog
from datetime import date
from structlog.testing import capture_logs

from lmk_scraper.core.exceptions import SchemaError
from lmk_scraper.core.normalizer import (
    DATE_PASSES,
    FOUND_AT_PASSES,
    NormalizationPass,
    apply_passes,
    disambiguate_date,
    parse_date,
    strip_stray_suffix,
    trim,
)


class TestTrim:
    """Tests for trim function."""

    def test_strips_space_tab_cr_lf(self):
        """Test the four trimmed characters."""
        assert trim(" \t\r\nLandratsamt\n\r\t ") == "Landratsamt"

    def test_keeps_inner_whitespace(self):
        """Test that inner whitespace is untouched."""
        assert trim("  Stadt  Stuttgart ") == "Stadt  Stuttgart"

    def test_keeps_other_whitespace(self):
        """Test that non-breaking spaces are not trimmed."""
        assert trim("\u00a0Ulm\u00a0") == "\u00a0Ulm\u00a0"


class TestDisambiguateDate:
    """Tests for disambiguate_date function."""

    def test_slash_separated(self):
        assert disambiguate_date("27.03.2025 / 28.03.2025") == "27.03.2025"

    def test_und_separated(self):
        assert disambiguate_date("10.06.2025 und 25.06.2025") == "10.06.2025"

    def test_bis_range(self):
        assert disambiguate_date("10.06.2025 bis 25.06.2025") == "10.06.2025"

    def test_comma_list(self):
        result = disambiguate_date("09.12.2025, 10.12.2025, 11.12.2025, 22.12.2025")
        assert result == "09.12.2025"

    def test_single_date_unchanged(self):
        assert disambiguate_date("15.04.2025") == "15.04.2025"

    def test_free_text_unchanged(self):
        assert disambiguate_date("keine Angabe") == "keine Angabe"

    def test_passes_run_in_order(self):
        """Test a cell combining several delimiters."""
        assert disambiguate_date("01.02.2025 und 03.02.2025 / 04.02.2025") == "01.02.2025"


class TestStraySuffix:
    """Tests for the trailing "z" cleanup of found-at cells."""

    def test_strips_z_after_date(self):
        assert strip_stray_suffix("12.03.2025z") == "12.03.2025"

    def test_strips_z_after_space(self):
        assert strip_stray_suffix("12.03.2025 z") == "12.03.2025"
        assert strip_stray_suffix(" 12.03.2025\tz\n") == "12.03.2025"

    def test_keeps_z_in_words(self):
        assert strip_stray_suffix("Kontrolle Schmutz") == "Kontrolle Schmutz"
        assert strip_stray_suffix("Kontrolle z") == "Kontrolle z"

    def test_found_at_passes_start_with_suffix_strip(self):
        assert [p.name for p in FOUND_AT_PASSES] == [
            "strip_stray_suffix",
            "split_slash",
            "split_und",
            "split_bis",
            "split_comma",
        ]

    def test_found_at_passes(self):
        assert apply_passes("05.05.2025 / 06.05.2025z", FOUND_AT_PASSES) == "05.05.2025"


class TestApplyPasses:
    """Tests for pass composition."""

    def test_custom_pass(self):
        """Test that extra passes can be appended."""
        upper = NormalizationPass("upper", str.upper)
        assert apply_passes("a / b", (*DATE_PASSES, upper)) == "A"

    def test_no_passes(self):
        assert apply_passes(" x ", ()) == " x "


class TestParseDate:
    """Tests for parse_date function."""

    def test_standard_format(self):
        assert parse_date("15.04.2025", "published at") == date(2025, 4, 15)

    def test_surrounding_whitespace(self):
        assert parse_date(" 01.12.2024\n", "found at") == date(2024, 12, 1)

    def test_no_dot_is_not_a_date(self):
        """Test that placeholder text yields None without error."""
        assert parse_date("keine Angabe", "found at") is None
        assert parse_date("", "found at") is None

    def test_wrong_order_fails(self):
        with pytest.raises(SchemaError, match="published at"):
            parse_date("2025.04.15", "published at")

    def test_single_digit_day_fails(self):
        with pytest.raises(SchemaError):
            parse_date("1.4.2025", "published at")

    def test_invalid_calendar_date_fails(self):
        with pytest.raises(SchemaError):
            parse_date("31.02.2025", "found at")

    def test_invalid_date_logged(self):
        with capture_logs() as logs:
            with pytest.raises(SchemaError):
                parse_date("31.02.2025", "found at", structlog.get_logger("test"))

        assert logs[0]["event"] == "invalid_date"
        assert logs[0]["field"] == "found at"

    def test_non_ascii_digits_fail(self):
        """Test that fullwidth digits are not accepted as a date."""
        with pytest.raises(SchemaError):
            parse_date("１５.０４.２０２５", "published at")

    def test_trailing_text_fails(self):
        with pytest.raises(SchemaError):
            parse_date("15.04.2025 (Nachkontrolle)", "found at")
