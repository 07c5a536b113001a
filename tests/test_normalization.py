import logging

import pytest

from contacts_sync.normalization import (
    dial_format,
    dial_region,
    digits_only,
    format_for_dialing,
    is_unclear_number,
    normalize,
)


def test_normalize_strips_formatting_and_us_country_code():
    assert normalize("+1 (234) 567-8901") == "2345678901"
    assert normalize("12345678901") == "2345678901"
    assert normalize("(234) 567-8901") == "2345678901"


def test_normalize_leaves_other_lengths_alone():
    assert normalize("+91 98765 43210") == "919876543210"
    assert normalize("020 1234 5678") == "02012345678"
    assert normalize("") == ""
    assert normalize(None) == ""
    assert normalize("call me") == ""


@pytest.mark.parametrize(
    "raw", ["+1 (234) 567-8901", "919876543210", "2345678901", "+44 20 7946 0958", "555-1234"]
)
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once


def test_normalize_collapses_any_eleven_digit_number_starting_with_one():
    # Known approximation: a non-NANP national number of the same shape is collapsed too.
    assert normalize("13812345678") == "3812345678"


def test_format_for_dialing_prefixes_bare_us_numbers():
    assert format_for_dialing("2345678901") == "12345678901"
    assert format_for_dialing("(415) 555-2671") == "14155552671"


def test_format_for_dialing_uk_trunk_prefix():
    assert format_for_dialing("020 1234 5678") == "442012345678"


def test_format_for_dialing_keeps_explicit_international_numbers():
    assert format_for_dialing("+44 20 7946 0958") == "442079460958"
    assert format_for_dialing("+1 415 555 2671") == "14155552671"
    assert format_for_dialing("+49 30 123456") == "4930123456"
    assert format_for_dialing("0049 30 1234 5678") == "00493012345678"


@pytest.mark.parametrize(
    "raw, expected_rule",
    [
        ("14155552671", "country_code_1"),
        ("919876543210", "international"),
        ("44207946095", "country_code_44"),
        ("49301234567", "country_code_49"),
        ("3312345678", "country_code_33"),
        ("3912345678", "country_code_39"),
        ("8112345678", "country_code_81"),
        ("86123456789", "country_code_86"),
    ],
)
def test_dial_format_country_code_rules(raw, expected_rule):
    result = dial_format(raw)
    assert result.rule == expected_rule
    assert result.digits == raw
    assert result.unclear is False


def test_india_shaped_ten_digit_number_is_read_as_us():
    # US/Canada wins over India for bare 10-digit numbers starting 6-9.
    result = dial_format("98765 43210")
    assert result.rule == "default_us"
    assert result.digits == "19876543210"


def test_dial_format_too_short_is_unclear_not_an_error(caplog):
    with caplog.at_level(logging.WARNING, logger="contacts_sync.normalization"):
        result = dial_format("555-12")
    assert result.digits == "55512"
    assert result.unclear is True
    assert result.rule == "too_short"
    assert "too short" in caplog.text


def test_dial_format_unclear_middle_lengths():
    result = dial_format("5551234")
    assert result.digits == "5551234"
    assert result.rule == "unclear"
    assert result.unclear is True


def test_eleven_digit_number_without_known_prefix_is_assumed_international():
    result = dial_format("255 1234 5678")
    assert result.digits == "25512345678"
    assert result.rule == "assumed_international"
    assert result.unclear is False


def test_dial_format_uses_injected_logger(caplog):
    custom = logging.getLogger("tests.dialer")
    with caplog.at_level(logging.WARNING, logger="tests.dialer"):
        dial_format("123", log=custom)
    assert any(record.name == "tests.dialer" for record in caplog.records)


def test_dial_format_respects_min_length():
    assert dial_format("5551234", min_length=8).rule == "too_short"


def test_dial_format_records_plus_sign():
    assert dial_format("+33 1 23 45 67 89").had_plus is True
    assert dial_format("33 1 23 45 67 89").had_plus is False


def test_dial_region_names_country():
    assert dial_region("14155552671") == "US"
    assert dial_region("442079460958") == "GB"
    assert dial_region("") == ""


def test_digit_helpers():
    assert digits_only("+1 (234)") == "1234"
    assert is_unclear_number("12-34") is True
    assert is_unclear_number("234 567 8901") is False
