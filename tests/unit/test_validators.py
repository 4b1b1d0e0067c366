"""Shape checks shared by request schemas and client forms."""

from decimal import Decimal

import pytest

from utils import validators as v


class TestMobile:
    @pytest.mark.parametrize("value", ["09171234567", "09000000000", "09999999999"])
    def test_accepts_11_digits_starting_09(self, value):
        assert v.is_valid_mobile(value)

    @pytest.mark.parametrize("value", [
        "9171234567",      # 10 digits
        "091712345678",    # 12 digits
        "08171234567",     # wrong prefix
        "+639171234567",
        "0917-123-4567",
        "09" + "١" * 9,     # Arabic-Indic digits
        "０９" + "1" * 9,  # fullwidth 0 9
        "",
        None,
    ])
    def test_rejects_everything_else(self, value):
        assert not v.is_valid_mobile(value)


class TestLandline:
    @pytest.mark.parametrize("value", ["1234567", "12345678", "1234567890"])
    def test_accepts_7_to_10_digits(self, value):
        assert v.is_valid_landline(value)

    @pytest.mark.parametrize("value", [
        "123456", "12345678901", "12-34567", "abcdefg", "",
        "२" * 8,           # Devanagari digits
        "١" * 7,
    ])
    def test_rejects_short_long_or_non_digits(self, value):
        assert not v.is_valid_landline(value)


def test_email():
    assert v.is_valid_email("crew@example.com")
    assert not v.is_valid_email("crew@example")
    assert not v.is_valid_email("crew example@x.com")
    assert not v.is_valid_email("@example.com")


def test_salary_band_ordering():
    assert v.is_salary_band_ordered(0, 0)
    assert v.is_salary_band_ordered("1000.00", Decimal("1999.99"))
    assert not v.is_salary_band_ordered(2000, 1000)
    assert not v.is_salary_band_ordered("abc", 1000)


def test_amount_checks():
    assert v.is_non_negative(0)
    assert v.is_non_negative("12.50")
    assert not v.is_non_negative(-1)
    assert not v.is_non_negative("NaN")
    assert v.is_positive(Decimal("0.01"))
    assert not v.is_positive(0)
    assert not v.is_positive(True)


def test_rank_change_compares_ids_as_text():
    assert v.is_rank_change(2, 3)
    assert not v.is_rank_change(3, 3)
    assert not v.is_rank_change("3", 3)
    assert not v.is_rank_change(None, 3)
    assert v.is_rank_change(1, None)


def test_missing_fields_treats_blank_as_missing():
    values = {"port_id": 1, "sign_on_date": "", "vessel_id": None, "rank_id": 0}
    assert v.missing_fields(values, "port_id", "sign_on_date", "vessel_id", "rank_id") == [
        "sign_on_date", "vessel_id",
    ]
