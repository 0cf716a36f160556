"""Tests for the common regex extraction utilities."""

import pytest

from grantflow.services.parser.extract.common import (
    calculate_confidence,
    extract_addresses,
    extract_dates,
    extract_emails,
    extract_name_patterns,
    extract_phones,
    extract_states,
    extract_zip_codes,
    normalize_text,
    parse_date,
    split_lines,
)


class TestParseDate:
    """ISO and US notations normalize to YYYY-MM-DD."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2024-01-15", "2024-01-15"),
            ("01/15/2024", "2024-01-15"),
            ("1/5/2024", "2024-01-05"),
            ("01-15-2024", "2024-01-15"),
            ("January 15, 2024", "2024-01-15"),
            ("Sept. 5 2024", "2024-09-05"),
        ],
    )
    def test_valid_dates(self, raw, expected):
        assert parse_date(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["02/30/2024", "13/01/2024", "2023-02-29", "", None, "soon", "Marchant 5 2024", "Maybe 5, 2024"],
    )
    def test_invalid_dates_rejected(self, raw):
        assert parse_date(raw) is None

    def test_leap_day(self):
        assert parse_date("02/29/2024") == "2024-02-29"


class TestExtractDates:
    def test_mixed_notations_in_document_order(self):
        text = "Issued 2020-06-01, renewed March 3, 2022 and due 12/31/2025."

        dates = extract_dates(text)

        assert [d.iso for d in dates] == ["2020-06-01", "2022-03-03", "2025-12-31"]
        assert all(d.confidence == 0.85 for d in dates)
        assert dates == sorted(dates, key=lambda d: d.start)

    def test_overlapping_month_patterns_reported_once(self):
        dates = extract_dates("Due Jan 5, 2024")

        assert len(dates) == 1
        assert dates[0].iso == "2024-01-05"

    def test_words_starting_with_a_month_are_not_dates(self):
        assert extract_dates("Marchant 5, 2024 and Maybe 7 2023") == []

    def test_offsets_point_at_each_occurrence(self):
        text = "DOB 01/01/2000 ... EXP 01/01/2000"

        dates = extract_dates(text)

        assert len(dates) == 2
        assert text[dates[1].start:].startswith("01/01/2000")
        assert dates[0].start < dates[1].start

    def test_calendar_invalid_dates_dropped(self):
        assert extract_dates("Born 02/30/2001") == []


class TestExtractPhones:
    def test_formats(self):
        text = "Call 555-123-4567, (555) 987 6543 or 555.222.3333"

        phones = extract_phones(text)

        assert [p.formatted for p in phones] == ["555-123-4567", "555-987-6543", "555-222-3333"]
        assert all(p.confidence == 0.9 for p in phones)

    def test_seven_digit_numbers_rejected(self):
        assert extract_phones("Call 555-1234 today") == []


def test_extract_emails_lowercases():
    emails = extract_emails("Contact Awards@Example.ORG or help@example.co.uk")

    assert [e.normalized for e in emails] == ["awards@example.org", "help@example.co.uk"]
    assert emails[0].confidence == 0.95


def test_extract_zip_codes():
    zips = extract_zip_codes("Mail to 90001 or 10001-1234")

    assert [z.raw for z in zips] == ["90001", "10001-1234"]
    assert zips[0].confidence == 0.85


def test_extract_states_standalone_uppercase_only():
    states = extract_states("Offices in CA and NY, not ca or CAT")

    assert [s.raw for s in states] == ["CA", "NY"]
    assert states[0].confidence == 0.8


class TestExtractAddresses:
    def test_full_address(self):
        addresses = extract_addresses("Send to 123 Main St, Springfield, IL 62701 today")

        assert len(addresses) == 1
        address = addresses[0]
        assert address.line1 == "123 Main St"
        assert address.city == "Springfield"
        assert address.state == "IL"
        assert address.zip == "62701"
        assert address.confidence == 0.75

    def test_address_without_city(self):
        addresses = extract_addresses("Office: 42 Oak Avenue TX 75001")

        assert len(addresses) == 1
        assert addresses[0].street == "Oak Avenue"
        assert addresses[0].city == ""
        assert addresses[0].state == "TX"

    def test_address_stays_on_one_line(self):
        addresses = extract_addresses("Account 4417\n9 Elm Road, Reno, NV 89501")

        assert len(addresses) == 1
        assert addresses[0].number == "9"
        assert addresses[0].line1 == "9 Elm Road"

    def test_unknown_street_suffix_not_matched(self):
        assert extract_addresses("10 Downing Terrace, London, UK 12345") == []


def test_extract_name_patterns_with_middle_initial():
    names = extract_name_patterns("Signed by Mary J. Smith on behalf of the board")

    assert len(names) == 1
    assert names[0].first == "Mary"
    assert names[0].middle == "J"
    assert names[0].last == "Smith"
    assert names[0].confidence == 0.6


class TestCalculateConfidence:
    def test_weighted_share(self):
        keywords = {"award": 3, "tuition": 1}

        assert calculate_confidence("Your AWARD letter", keywords) == pytest.approx(0.75)

    def test_empty_keyword_map_scores_zero(self):
        assert calculate_confidence("anything", {}) == 0.0

    def test_adding_a_present_keyword_never_lowers_score(self):
        keywords = {"award": 3, "tuition": 1, "grant": 2}
        base = calculate_confidence("award and tuition", keywords)
        more = calculate_confidence("award and tuition and grant", keywords)

        assert more >= base
        assert more == pytest.approx(1.0)

    def test_weight_overrides(self):
        keywords = {"award": 1, "tuition": 1}

        score = calculate_confidence("award", keywords, weights={"award": 3})

        assert score == pytest.approx(0.75)


def test_normalize_text():
    assert normalize_text("  Hello\n\n  World\té!  ") == "Hello World !"


def test_split_lines_drops_blank_lines():
    assert split_lines("First line\n\n   \n  Second   line  \n") == ["First line", "Second line"]
